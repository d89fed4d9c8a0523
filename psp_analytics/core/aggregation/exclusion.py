"""
Exclusion Recalculator: what-if totals with some PSPs removed.

Works on the journeys retained in an AnalysisResult; raw transactions are
never re-read and the result is never mutated.
"""

from typing import Iterable

from psp_analytics.core.models import AnalysisResult, ExclusionTotals, Journey
from psp_analytics.observability.logger import get_logger
from psp_analytics.observability.metrics import (
    exclusion_recalculations_total,
    increment_counter,
)

from .unique_counting import UniqueCounts, percentage

logger = get_logger(__name__)


def totals_without(journeys: Iterable[Journey], excluded_psps: Iterable[str]) -> UniqueCounts:
    """
    Journey outcomes after dropping every attempt by an excluded PSP.

    A journey is approved when any remaining attempt approves, declined when
    attempts remain but none approves, and left out entirely when no
    attempt remains.
    """
    excluded = set(excluded_psps)
    counts = UniqueCounts()

    for journey in journeys:
        remaining = [a for a in journey.attempts if a.psp_name not in excluded]
        if not remaining:
            continue
        if any(attempt.is_approved for attempt in remaining):
            counts.approved += 1
        else:
            counts.declined += 1

    return counts


def recalculate_with_exclusions(
    result: AnalysisResult,
    excluded_psps: Iterable[str],
) -> ExclusionTotals:
    """
    Transaction-level totals as if ``excluded_psps`` never existed.

    An empty exclusion set returns the baseline transaction-level totals
    unchanged. Excluding every PSP yields all-zero totals and a 0 rate.

    Args:
        result: Baseline analysis holding the built journeys
        excluded_psps: PSP names to remove

    Returns:
        Recomputed totals plus the sorted excluded PSP names
    """
    excluded = tuple(sorted(set(excluded_psps)))
    increment_counter(exclusion_recalculations_total)

    if not excluded:
        baseline = result.transaction_metrics
        return ExclusionTotals(
            total_approved_transactions=baseline.total_approved_transactions,
            total_unique_declined_transactions=baseline.total_unique_declined_transactions,
            total_processed_transactions=baseline.total_processed_transactions,
            weighted_success_rate=baseline.weighted_success_rate,
        )

    counts = totals_without(result.journeys.values(), excluded)
    logger.debug(
        "Recalculated totals with excluded PSPs",
        extra={"excluded_psps": list(excluded), "processed": counts.total}
    )

    return ExclusionTotals(
        total_approved_transactions=counts.approved,
        total_unique_declined_transactions=counts.declined,
        total_processed_transactions=counts.total,
        weighted_success_rate=percentage(counts.approved, counts.total),
        excluded_psps=excluded,
    )
