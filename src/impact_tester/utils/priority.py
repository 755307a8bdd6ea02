"""Priority ranking for generated scenarios"""
from typing import Dict, Iterable, List, Optional

from impact_tester.core.models import TestScenario


PRIORITY_RANKS: Dict[str, int] = {
    "Alta": 1,
    "High": 1,
    "Media": 2,
    "Medium": 2,
    "Baja": 3,
    "Low": 3,
}

UNRANKED = 4


def rank(label: Optional[str]) -> int:
    """
    Rank a priority label, 1 being the highest.

    Matching is exact; unknown or empty labels rank last.

    Example:
        >>> rank("Alta")
        1
        >>> rank("urgent")
        4
    """
    if not label:
        return UNRANKED
    return PRIORITY_RANKS.get(label, UNRANKED)


def sort_by_priority(scenarios: Iterable[TestScenario]) -> List[TestScenario]:
    """Return scenarios ordered by rank; equal ranks keep their input order."""
    # sorted() is stable
    return sorted(scenarios, key=lambda s: rank(s.priority))
