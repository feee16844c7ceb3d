"""Filter chain for browsing candidates.

Filter order:
  1. SearchQueryFilter - case-insensitive substring on name OR role
  2. RoleFilter        - exact role, "All Roles" passes everything

An empty result is a valid answer, never an error.
"""

import logging
from collections.abc import Callable

from candidate_ai.core.schemas import Candidate

logger = logging.getLogger(__name__)

ALL_ROLES = "All Roles"

# A filter is a callable that takes candidates and returns a subset.
Filter = Callable[[list[Candidate]], list[Candidate]]


class SearchQueryFilter:
    """Keep candidates whose name or role contains the query (case-insensitive).

    A blank query is a no-op.
    """

    def __init__(self, query: str) -> None:
        self._query = query.lower().strip()

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._query:
            return candidates
        result = [c for c in candidates if self._matches(c)]
        excluded = len(candidates) - len(result)
        if excluded:
            logger.debug("SearchQueryFilter: removed %d candidates", excluded)
        return result

    def _matches(self, candidate: Candidate) -> bool:
        return self._query in candidate.name.lower() or self._query in candidate.role.lower()


class RoleFilter:
    """Keep candidates with exactly the given role."""

    def __init__(self, role: str = ALL_ROLES) -> None:
        self._role = role

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if self._role == ALL_ROLES:
            return candidates
        result = [c for c in candidates if c.role == self._role]
        excluded = len(candidates) - len(result)
        if excluded:
            logger.debug("RoleFilter: removed %d candidates", excluded)
        return result


def run_filter_chain(
    candidates: list[Candidate],
    filters: list[Filter],
) -> list[Candidate]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result


def filter_candidates(
    candidates: list[Candidate],
    query: str = "",
    role: str = ALL_ROLES,
) -> list[Candidate]:
    """Search and role-filter candidates, preserving their order."""
    return run_filter_chain(candidates, [SearchQueryFilter(query), RoleFilter(role)])
