"""Synthetic candidate profiles and baseline evaluations."""

import random
from datetime import datetime

from candidate_ai.core.schemas import Candidate, Evaluation

ROLES = (
    "Senior Software Engineer",
    "Product Manager",
    "UX Designer",
    "Operations Director",
    "Sustainability Lead",
    "HR Business Partner",
    "Marketing Strategy Head",
    "Data Scientist",
    "CTO",
    "Project Manager",
)

SKILLS_POOL = (
    "React", "Node.js", "Python", "Agile", "CSR", "Cloud Architecture",
    "Leadership", "Strategic Planning", "Risk Mitigation", "Data Visualization",
    "Public Speaking", "Negotiation", "Conflict Resolution", "Supply Chain",
)

ACHIEVEMENTS_POOL = (
    "Led a cross-functional team of 20 to deliver a $2M project under budget.",
    "Reduced operational costs by 15% through strategic automation.",
    "Developed a patent-pending algorithm for real-time data processing.",
    "Pioneered the company's first ESG reporting framework.",
    "Managed a major system outage with zero data loss in under 2 hours.",
    "Increased user engagement by 40% through UX redesign.",
    "Spearheaded a diversity and inclusion initiative that saw 30% growth in diverse hiring.",
    "Authored a white paper on sustainable supply chain management.",
)

FIRST_NAMES = (
    "James", "Mary", "Robert", "Patricia", "John", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph",
    "Jessica", "Thomas", "Sarah", "Charles", "Karen",
)

LAST_NAMES = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin",
)

MOCK_SUMMARY = (
    "Candidate shows strong potential in key leadership areas. Values alignment is high."
)


def generate_candidates(count: int = 40, rng: random.Random | None = None) -> list[Candidate]:
    """Build ``count`` random candidate profiles with ids ``c-1`` .. ``c-<count>``."""
    rng = rng or random.Random()
    candidates: list[Candidate] = []
    for i in range(1, count + 1):
        skills = rng.sample(SKILLS_POOL, rng.randint(3, 6))
        achievements = rng.sample(ACHIEVEMENTS_POOL, rng.randint(2, 3))
        candidates.append(
            Candidate(
                id=f"c-{i}",
                name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                role=rng.choice(ROLES),
                experience_years=rng.randint(3, 17),
                skills=skills,
                bio=(
                    f"Highly experienced professional with a background in {skills[0]} "
                    f"and {skills[1]}. Proven track record of delivering high-impact projects."
                ),
                avatar=f"https://picsum.photos/seed/{i}/150/150",
                achievements=achievements,
            )
        )
    return candidates


def generate_mock_evaluations(
    candidates: list[Candidate],
    rng: random.Random | None = None,
) -> list[Evaluation]:
    """One whole-number baseline evaluation per candidate, in candidate order."""
    rng = rng or random.Random()
    now = datetime.now()
    return [
        Evaluation(
            candidate_id=c.id,
            crisis_management_score=float(rng.randint(60, 99)),
            sustainability_score=float(rng.randint(50, 99)),
            team_motivation_score=float(rng.randint(70, 99)),
            summary=MOCK_SUMMARY,
            last_evaluated=now,
        )
        for c in candidates
    ]
