"""
Unique counting: at most one outcome per (journey, PSP) pair.

For a PSP P involved in journey J, J counts once towards P: approved when
any attempt by P in J approved, declined otherwise. Never both, never
neither, never weighted by the number of attempts.
"""

from dataclasses import dataclass
from typing import Iterable

from psp_analytics.core.models import Journey


@dataclass
class UniqueCounts:
    approved: int = 0
    declined: int = 0

    @property
    def total(self) -> int:
        return self.approved + self.declined


def percentage(numerator: float, denominator: float) -> float:
    """numerator / denominator x 100, or 0 when the denominator is 0."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def rounded_percentage(numerator: float, denominator: float, digits: int = 2) -> float:
    return round(percentage(numerator, denominator), digits)


def count_unique_by_psp(journeys: Iterable[Journey]) -> dict[str, UniqueCounts]:
    """Unique approved/declined journeys per PSP, PSPs in first-seen order."""
    counts: dict[str, UniqueCounts] = {}
    for journey in journeys:
        for psp_name in journey.psps_involved:
            psp_counts = counts.setdefault(psp_name, UniqueCounts())
            if journey.psp_approved(psp_name):
                psp_counts.approved += 1
            else:
                psp_counts.declined += 1
    return counts


def count_journey_outcomes(journeys: Iterable[Journey]) -> UniqueCounts:
    """Successful vs failed journeys, each journey counted once."""
    counts = UniqueCounts()
    for journey in journeys:
        if journey.is_successful:
            counts.approved += 1
        else:
            counts.declined += 1
    return counts


def group_by_country(journeys: Iterable[Journey]) -> dict[str, list[Journey]]:
    grouped: dict[str, list[Journey]] = {}
    for journey in journeys:
        grouped.setdefault(journey.country, []).append(journey)
    return grouped
