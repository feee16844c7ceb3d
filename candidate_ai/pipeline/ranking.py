"""Ranking: the mean of the three competency scores, sorted descending.

Rankings are a pure projection of the current evaluation collection.
They are recomputed on demand and never stored.
"""

from collections.abc import Sequence

from candidate_ai.core.schemas import Evaluation, Ranking


def total_score(evaluation: Evaluation) -> float:
    """Arithmetic mean of the three dimension scores."""
    return (
        evaluation.crisis_management_score
        + evaluation.sustainability_score
        + evaluation.team_motivation_score
    ) / 3


def compute_rankings(evaluations: Sequence[Evaluation]) -> list[Ranking]:
    """Rank evaluations by total score, highest first.

    ``sorted`` is stable, so equal totals keep their input order.
    """
    totals = [(e.candidate_id, total_score(e)) for e in evaluations]
    ordered = sorted(totals, key=lambda t: t[1], reverse=True)
    return [
        Ranking(candidate_id=candidate_id, total_score=score, rank=i)
        for i, (candidate_id, score) in enumerate(ordered, start=1)
    ]


def average_score(rankings: Sequence[Ranking]) -> float:
    """Mean total score, 0.0 for an empty ranking."""
    return sum(r.total_score for r in rankings) / (len(rankings) or 1)


def find_ranking(rankings: Sequence[Ranking], candidate_id: str) -> Ranking | None:
    return next((r for r in rankings if r.candidate_id == candidate_id), None)
