"""Dashboard context: owns candidates, evaluations, notes, and the comparison set.

All application state lives on one explicit object instead of module globals.
The evaluation collection holds at most one Evaluation per candidate and
rankings are always derived from it on demand.
"""

import asyncio
import json
import logging
import random
import sqlite3
from contextlib import ExitStack
from types import TracebackType

from candidate_ai.core.config import Settings
from candidate_ai.core.db import (
    get_value,
    insert_candidates,
    load_candidates,
    load_evaluations,
    replace_evaluations,
    set_value,
    upsert_evaluation,
)
from candidate_ai.core.notes import NoteStore
from candidate_ai.core.schemas import Candidate, DashboardSummary, Evaluation, Ranking
from candidate_ai.data.mock import generate_candidates, generate_mock_evaluations
from candidate_ai.llm import get_provider
from candidate_ai.llm.base import LLMProvider
from candidate_ai.pipeline.evaluator import evaluate_candidate
from candidate_ai.pipeline.filters import ALL_ROLES, filter_candidates
from candidate_ai.pipeline.ranking import average_score, compute_rankings, find_ranking

logger = logging.getLogger(__name__)

COMPARE_NAMESPACE = "candidate_ai_compare"


class DashboardContext:
    """Application context shared by every dashboard operation.

    Usage::

        with DashboardContext(settings, conn) as dashboard:
            await dashboard.evaluate("c-3")
            top = dashboard.rankings[:10]
    """

    def __init__(
        self,
        settings: Settings,
        conn: sqlite3.Connection,
        provider: LLMProvider | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings
        self._conn = conn
        self._provider = provider
        self._rng = rng or random.Random(settings.mock.seed)
        self._candidates: list[Candidate] = []
        self._evaluations: list[Evaluation] = []
        self._compare_ids: list[str] = []
        self._in_flight: set[str] = set()
        self._notes = NoteStore(conn)
        self._scope = ExitStack()
        self.selected_id: str | None = None

    def __enter__(self) -> "DashboardContext":
        self._load()
        self._scope.enter_context(self._notes)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._scope.close()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = get_provider(self.settings.evaluation.provider)
        return self._provider

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def evaluations(self) -> list[Evaluation]:
        return list(self._evaluations)

    @property
    def rankings(self) -> list[Ranking]:
        return compute_rankings(self._evaluations)

    def get_candidate(self, candidate_id: str) -> Candidate:
        """Return a candidate by id. Raises KeyError for unknown ids."""
        for c in self._candidates:
            if c.id == candidate_id:
                return c
        msg = f"Unknown candidate '{candidate_id}'"
        raise KeyError(msg)

    def get_evaluation(self, candidate_id: str) -> Evaluation | None:
        return next((e for e in self._evaluations if e.candidate_id == candidate_id), None)

    def get_ranking(self, candidate_id: str) -> Ranking | None:
        return find_ranking(self.rankings, candidate_id)

    def filter_candidates(self, query: str = "", role: str = ALL_ROLES) -> list[Candidate]:
        return filter_candidates(self._candidates, query=query, role=role)

    def summary(self, top: int = 10) -> DashboardSummary:
        """Headline numbers plus the top-``top`` leaderboard."""
        rankings = self.rankings
        return DashboardSummary(
            total_candidates=len(self._candidates),
            evaluation_count=len(self._evaluations),
            average_score=average_score(rankings),
            leaderboard=rankings[:top],
        )

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def is_evaluating(self, candidate_id: str) -> bool:
        return candidate_id in self._in_flight

    async def evaluate(self, candidate_id: str, model: str | None = None) -> Evaluation | None:
        """Run an AI evaluation for one candidate and store the result.

        At most one evaluation per candidate is in flight; a call made while
        one is outstanding returns None without issuing a request.
        """
        candidate = self.get_candidate(candidate_id)
        if candidate_id in self._in_flight:
            logger.info("Evaluation already in flight for '%s' - skipping", candidate_id)
            return None

        self._in_flight.add(candidate_id)
        try:
            evaluation = await evaluate_candidate(
                candidate,
                model or self.settings.evaluation.model,
                self.provider,
                rng=self._rng,
            )
            self._upsert(evaluation)
        finally:
            self._in_flight.discard(candidate_id)

        logger.info(
            "Evaluated '%s': crisis=%.1f sustainability=%.1f motivation=%.1f",
            candidate_id,
            evaluation.crisis_management_score,
            evaluation.sustainability_score,
            evaluation.team_motivation_score,
        )
        return evaluation

    async def evaluate_many(
        self,
        candidate_ids: list[str],
        model: str | None = None,
    ) -> list[Evaluation | None]:
        """Evaluate several candidates concurrently, bounded by max_concurrency."""
        for candidate_id in candidate_ids:
            self.get_candidate(candidate_id)

        semaphore = asyncio.Semaphore(self.settings.evaluation.max_concurrency)

        async def _bounded(candidate_id: str) -> Evaluation | None:
            async with semaphore:
                return await self.evaluate(candidate_id, model)

        return list(await asyncio.gather(*(_bounded(cid) for cid in candidate_ids)))

    async def select(self, candidate_id: str) -> Evaluation | None:
        """Select a candidate; evaluates it when auto_evaluate is enabled."""
        self.get_candidate(candidate_id)
        self.selected_id = candidate_id
        if self.settings.evaluation.auto_evaluate:
            return await self.evaluate(candidate_id)
        return None

    def _upsert(self, evaluation: Evaluation) -> None:
        upsert_evaluation(self._conn, evaluation)
        for i, existing in enumerate(self._evaluations):
            if existing.candidate_id == evaluation.candidate_id:
                self._evaluations[i] = evaluation
                break
        else:
            self._evaluations.append(evaluation)

    # ------------------------------------------------------------------
    # Comparison and notes
    # ------------------------------------------------------------------

    def toggle_compare(self, candidate_id: str) -> bool:
        """Add or remove a candidate from the comparison set.

        Returns True if the candidate is now being compared.
        """
        self.get_candidate(candidate_id)
        if candidate_id in self._compare_ids:
            self._compare_ids.remove(candidate_id)
            added = False
        else:
            self._compare_ids.append(candidate_id)
            added = True
        set_value(self._conn, COMPARE_NAMESPACE, json.dumps(self._compare_ids))
        return added

    def compared_candidates(self) -> list[Candidate]:
        """Candidates in the comparison set, in candidate order."""
        return [c for c in self._candidates if c.id in self._compare_ids]

    @property
    def notes(self) -> dict[str, str]:
        return self._notes.all()

    def get_note(self, candidate_id: str) -> str:
        return self._notes.get(candidate_id)

    def set_note(self, candidate_id: str, text: str) -> None:
        self.get_candidate(candidate_id)
        self._notes.set(candidate_id, text)

    def reset(self) -> None:
        """Regenerate mock evaluations and clear notes and the comparison set."""
        evaluations = generate_mock_evaluations(self._candidates, self._rng)
        replace_evaluations(self._conn, evaluations)
        self._evaluations = evaluations
        self._notes.clear()
        self._compare_ids = []
        set_value(self._conn, COMPARE_NAMESPACE, "[]")
        logger.info("Reset %d evaluations, notes and comparison list", len(self._evaluations))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self) -> None:
        self._candidates = load_candidates(self._conn)
        if not self._candidates:
            self._seed()
        else:
            self._evaluations = load_evaluations(self._conn)
        self._compare_ids = self._load_compare_ids()
        logger.debug(
            "Loaded %d candidates, %d evaluations",
            len(self._candidates),
            len(self._evaluations),
        )

    def _seed(self) -> None:
        count = self.settings.mock.candidate_count
        logger.info("Fresh database - generating %d mock candidates", count)
        self._candidates = generate_candidates(count, self._rng)
        insert_candidates(self._conn, self._candidates)
        evaluations = generate_mock_evaluations(self._candidates, self._rng)
        replace_evaluations(self._conn, evaluations)
        self._evaluations = evaluations

    def _load_compare_ids(self) -> list[str]:
        raw = get_value(self._conn, COMPARE_NAMESPACE)
        if raw is None:
            return []
        try:
            ids = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored comparison list is not valid JSON - starting empty")
            return []
        if not isinstance(ids, list):
            logger.warning("Stored comparison list is not a list - starting empty")
            return []
        known = {c.id for c in self._candidates}
        return [i for i in ids if i in known]
