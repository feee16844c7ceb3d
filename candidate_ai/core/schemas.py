"""Core data models for the candidate dashboard."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Snake-case attributes, camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Candidate(_CamelModel):
    """An immutable candidate profile.

    Created once by the mock generator and never mutated afterwards.
    """

    id: str
    name: str
    role: str
    experience_years: int = Field(ge=0)
    skills: list[str] = Field(default_factory=list)
    bio: str = ""
    avatar: str = ""
    achievements: list[str] = Field(default_factory=list)


class EvaluationScores(_CamelModel):
    """The structured payload returned by the AI service."""

    crisis_management_score: float
    sustainability_score: float
    team_motivation_score: float
    summary: str


class Evaluation(_CamelModel):
    """AI (or heuristic) scores for one candidate.

    Scores are expected in 0-100 but are deliberately not clamped here.
    """

    candidate_id: str
    crisis_management_score: float
    sustainability_score: float
    team_motivation_score: float
    summary: str
    last_evaluated: datetime = Field(default_factory=datetime.now)


class Ranking(_CamelModel):
    """Derived projection of an Evaluation. Never persisted."""

    candidate_id: str
    total_score: float
    rank: int = Field(ge=1)


class DashboardSummary(_CamelModel):
    """Headline numbers shown on the dashboard overview."""

    total_candidates: int
    evaluation_count: int
    average_score: float
    leaderboard: list[Ranking] = Field(default_factory=list)
