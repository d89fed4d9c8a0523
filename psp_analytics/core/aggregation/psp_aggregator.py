"""
PSP-level aggregation over journeys.
"""

from dataclasses import dataclass, field
from typing import Iterable

from psp_analytics.core.models import AttemptOutcome, Journey, PSPLevelMetrics, PSPStats

from .unique_counting import count_unique_by_psp, percentage


@dataclass
class _AttemptTally:
    total: int = 0
    approved: int = 0
    declined: int = 0
    positions: list[int] = field(default_factory=list)


class PSPAggregator:
    """
    Computes PSPStats for every PSP seen in the journeys.

    Attempt counts include every retry; unique counts follow the
    one-outcome-per-(journey, PSP) rule. Overall totals sum the unique
    counts over PSPs.
    """

    def aggregate(self, journeys: Iterable[Journey]) -> PSPLevelMetrics:
        journeys = list(journeys)

        tallies: dict[str, _AttemptTally] = {}
        for journey in journeys:
            for attempt in journey.attempts:
                tally = tallies.setdefault(attempt.psp_name, _AttemptTally())
                tally.total += 1
                tally.positions.append(attempt.position)
                if attempt.outcome is AttemptOutcome.APPROVED:
                    tally.approved += 1
                elif attempt.outcome is AttemptOutcome.DECLINED:
                    tally.declined += 1

        unique = count_unique_by_psp(journeys)

        psp_stats: dict[str, PSPStats] = {}
        for psp_name, tally in tallies.items():
            counts = unique[psp_name]
            psp_stats[psp_name] = PSPStats(
                total_attempts=tally.total,
                approved_attempts=tally.approved,
                declined_attempts=tally.declined,
                unique_approved=counts.approved,
                unique_declined=counts.declined,
                individual_approval_rate=percentage(tally.approved, tally.total),
                true_approval_rate=percentage(counts.approved, counts.total),
                avg_position=sum(tally.positions) / len(tally.positions) if tally.positions else 0.0,
            )

        total_approved = sum(stats.unique_approved for stats in psp_stats.values())
        total_declined = sum(stats.unique_declined for stats in psp_stats.values())
        total_processed = total_approved + total_declined

        return PSPLevelMetrics(
            psp_stats=psp_stats,
            total_approved_transactions=total_approved,
            total_unique_declined_transactions=total_declined,
            total_processed_transactions=total_processed,
            weighted_success_rate=percentage(total_approved, total_processed),
        )
