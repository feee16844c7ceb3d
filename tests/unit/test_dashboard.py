"""Tests for DashboardContext: seeding, evaluation upsert, guard, notes, reset."""

import asyncio
import random
import sqlite3
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from candidate_ai.core.config import Settings
from candidate_ai.core.db import init_db, load_evaluations
from candidate_ai.pipeline.dashboard import DashboardContext
from candidate_ai.pipeline.evaluator import FALLBACK_SUMMARY
from candidate_ai.pipeline.ranking import compute_rankings

HIGH_RESPONSE = (
    '{"crisisManagementScore": 100, "sustainabilityScore": 100, '
    '"teamMotivationScore": 100, "summary": "Exceptional."}'
)


def _settings(**evaluation: object) -> Settings:
    return Settings.model_validate({
        "mock": {"candidate_count": 6, "seed": 11},
        "evaluation": evaluation,
    })


def _provider(response: str = HIGH_RESPONSE) -> MagicMock:
    provider = MagicMock()
    provider.complete = AsyncMock(return_value=response)
    return provider


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    return init_db(tmp_path / "test.db")


class TestSeeding:
    def test_fresh_database_seeded(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            assert len(dashboard.candidates) == 6
            assert len(dashboard.evaluations) == 6
            assert [e.candidate_id for e in dashboard.evaluations] == [
                c.id for c in dashboard.candidates
            ]

    def test_reopen_loads_persisted_state(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as first:
            candidates = first.candidates
            evaluations = first.evaluations

        with DashboardContext(_settings(), db, _provider(), rng=random.Random(99)) as second:
            assert second.candidates == candidates
            assert second.evaluations == evaluations

    def test_provider_resolved_from_settings(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(provider="openai", model="gpt-4o"), db) as dashboard:
            assert dashboard.provider.provider_id == "openai"


class TestQueries:
    def test_rankings_follow_evaluations(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            assert dashboard.rankings == compute_rankings(dashboard.evaluations)

    def test_get_candidate_unknown_raises(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            with pytest.raises(KeyError, match="Unknown candidate 'c-999'"):
                dashboard.get_candidate("c-999")

    def test_get_ranking(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            top = dashboard.rankings[0]
            assert dashboard.get_ranking(top.candidate_id) == top
            assert dashboard.get_ranking("c-999") is None

    def test_filter_candidates(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            role = dashboard.candidates[0].role
            result = dashboard.filter_candidates(role=role)
            assert result
            assert all(c.role == role for c in result)
            assert dashboard.filter_candidates(query="no such person") == []

    def test_summary(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            summary = dashboard.summary(top=3)
            assert summary.total_candidates == 6
            assert summary.evaluation_count == 6
            assert len(summary.leaderboard) == 3
            assert summary.leaderboard == dashboard.rankings[:3]
            expected = sum(r.total_score for r in dashboard.rankings) / 6
            assert summary.average_score == pytest.approx(expected)


class TestEvaluate:
    async def test_upsert_replaces_in_place(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            order_before = [e.candidate_id for e in dashboard.evaluations]

            evaluation = await dashboard.evaluate("c-4")

            assert evaluation is not None
            assert evaluation.summary == "Exceptional."
            assert [e.candidate_id for e in dashboard.evaluations] == order_before
            assert dashboard.get_evaluation("c-4") == evaluation
            assert dashboard.get_ranking("c-4").rank == 1  # type: ignore[union-attr]

    async def test_persisted(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            await dashboard.evaluate("c-2")
        stored = {e.candidate_id: e for e in load_evaluations(db)}
        assert stored["c-2"].summary == "Exceptional."

    async def test_new_evaluation_appended(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            dashboard.reset()
            dashboard._evaluations = dashboard._evaluations[1:]
            await dashboard.evaluate("c-1")
            assert dashboard.evaluations[-1].candidate_id == "c-1"

    async def test_uses_configured_model(self, db: sqlite3.Connection) -> None:
        provider = _provider()
        with DashboardContext(_settings(model="gemini-flash-lite-latest"), db, provider) as dashboard:
            await dashboard.evaluate("c-1")
        assert provider.complete.call_args.kwargs["model"] == "gemini-flash-lite-latest"

    async def test_model_override(self, db: sqlite3.Connection) -> None:
        provider = _provider()
        with DashboardContext(_settings(), db, provider) as dashboard:
            await dashboard.evaluate("c-1", model="gemini-3-pro-preview")
        assert provider.complete.call_args.kwargs["model"] == "gemini-3-pro-preview"

    async def test_failure_stores_fallback(self, db: sqlite3.Connection) -> None:
        provider = MagicMock()
        provider.complete = AsyncMock(side_effect=RuntimeError("down"))
        with DashboardContext(_settings(), db, provider) as dashboard:
            evaluation = await dashboard.evaluate("c-3")
            assert evaluation is not None
            assert evaluation.summary == FALLBACK_SUMMARY
            assert dashboard.get_evaluation("c-3") == evaluation
            assert not dashboard.is_evaluating("c-3")

    async def test_unknown_candidate_raises(self, db: sqlite3.Connection) -> None:
        provider = _provider()
        with DashboardContext(_settings(), db, provider) as dashboard:
            with pytest.raises(KeyError):
                await dashboard.evaluate("c-999")
        provider.complete.assert_not_called()

    async def test_single_in_flight_per_candidate(self, db: sqlite3.Connection) -> None:
        release = asyncio.Event()

        async def slow_complete(*args: object, **kwargs: object) -> str:
            await release.wait()
            return HIGH_RESPONSE

        provider = MagicMock()
        provider.complete = AsyncMock(side_effect=slow_complete)

        with DashboardContext(_settings(), db, provider) as dashboard:
            first = asyncio.create_task(dashboard.evaluate("c-1"))
            await asyncio.sleep(0)
            assert dashboard.is_evaluating("c-1")

            second = await dashboard.evaluate("c-1")
            assert second is None

            release.set()
            result = await first

        assert result is not None
        assert provider.complete.await_count == 1

    async def test_different_candidates_run_concurrently(self, db: sqlite3.Connection) -> None:
        release = asyncio.Event()

        async def slow_complete(*args: object, **kwargs: object) -> str:
            await release.wait()
            return HIGH_RESPONSE

        provider = MagicMock()
        provider.complete = AsyncMock(side_effect=slow_complete)

        with DashboardContext(_settings(), db, provider) as dashboard:
            tasks = [asyncio.create_task(dashboard.evaluate(cid)) for cid in ("c-1", "c-2")]
            await asyncio.sleep(0)
            assert dashboard.is_evaluating("c-1")
            assert dashboard.is_evaluating("c-2")
            release.set()
            results = await asyncio.gather(*tasks)

        assert all(r is not None for r in results)

    async def test_evaluate_many(self, db: sqlite3.Connection) -> None:
        provider = _provider()
        with DashboardContext(_settings(max_concurrency=2), db, provider) as dashboard:
            results = await dashboard.evaluate_many(["c-1", "c-2", "c-3"])
        assert [r.candidate_id for r in results if r is not None] == ["c-1", "c-2", "c-3"]
        assert provider.complete.await_count == 3

    async def test_evaluate_many_validates_ids_first(self, db: sqlite3.Connection) -> None:
        provider = _provider()
        with DashboardContext(_settings(), db, provider) as dashboard:
            with pytest.raises(KeyError):
                await dashboard.evaluate_many(["c-1", "c-999"])
        provider.complete.assert_not_called()


class TestSelect:
    async def test_select_without_auto_evaluate(self, db: sqlite3.Connection) -> None:
        provider = _provider()
        with DashboardContext(_settings(), db, provider) as dashboard:
            assert await dashboard.select("c-2") is None
            assert dashboard.selected_id == "c-2"
        provider.complete.assert_not_called()

    async def test_select_with_auto_evaluate(self, db: sqlite3.Connection) -> None:
        provider = _provider()
        with DashboardContext(_settings(auto_evaluate=True), db, provider) as dashboard:
            evaluation = await dashboard.select("c-2")
        assert evaluation is not None
        assert evaluation.candidate_id == "c-2"


class TestCompareAndNotes:
    def test_toggle_compare(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            assert dashboard.toggle_compare("c-3") is True
            assert dashboard.toggle_compare("c-1") is True
            assert [c.id for c in dashboard.compared_candidates()] == ["c-1", "c-3"]
            assert dashboard.toggle_compare("c-3") is False
            assert [c.id for c in dashboard.compared_candidates()] == ["c-1"]

    def test_compare_persisted(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            dashboard.toggle_compare("c-2")
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            assert [c.id for c in dashboard.compared_candidates()] == ["c-2"]

    def test_compare_unknown_raises(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            with pytest.raises(KeyError):
                dashboard.toggle_compare("c-999")

    def test_notes_persisted(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            dashboard.set_note("c-1", "Follow up Tuesday")
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            assert dashboard.get_note("c-1") == "Follow up Tuesday"
            assert dashboard.notes == {"c-1": "Follow up Tuesday"}

    def test_note_for_unknown_candidate_raises(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            with pytest.raises(KeyError):
                dashboard.set_note("c-999", "x")


class TestReset:
    async def test_reset_clears_state(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            candidates = dashboard.candidates
            await dashboard.evaluate("c-1")
            dashboard.set_note("c-1", "keep?")
            dashboard.toggle_compare("c-1")

            dashboard.reset()

            assert dashboard.candidates == candidates
            assert len(dashboard.evaluations) == len(candidates)
            assert all(e.summary != "Exceptional." for e in dashboard.evaluations)
            assert dashboard.notes == {}
            assert dashboard.compared_candidates() == []

        with DashboardContext(_settings(), db, _provider()) as dashboard:
            assert dashboard.notes == {}
            assert dashboard.compared_candidates() == []
            assert len(load_evaluations(db)) == 6

    def test_failed_reset_keeps_evaluations(self, db: sqlite3.Connection) -> None:
        with DashboardContext(_settings(), db, _provider()) as dashboard:
            before = dashboard.evaluations
            dashboard.set_note("c-1", "keep")
            db.execute(
                """
                CREATE TEMP TRIGGER fail_third_write BEFORE INSERT ON evaluations
                WHEN NEW.candidate_id = 'c-3'
                BEGIN SELECT RAISE(ABORT, 'disk full'); END
                """
            )

            with pytest.raises(sqlite3.Error, match="disk full"):
                dashboard.reset()

            assert dashboard.evaluations == before
            assert load_evaluations(db) == before
            assert dashboard.get_note("c-1") == "keep"

    def test_reset_logs(self, db: sqlite3.Connection) -> None:
        with (
            DashboardContext(_settings(), db, _provider()) as dashboard,
            patch("candidate_ai.pipeline.dashboard.logger") as mock_logger,
        ):
            dashboard.reset()
        mock_logger.info.assert_called_once()
