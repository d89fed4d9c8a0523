"""
Roll-ups over retried transactions, cross-PSP flows and decline reasons.
"""

from collections import Counter
from typing import Iterable

from psp_analytics.core.models import (
    CrossPSPFlow,
    DeclineReason,
    DeclineSummary,
    PSPRescueStats,
    RetriedTransaction,
    RetrySummary,
    RoutingPattern,
)

from .unique_counting import percentage, rounded_percentage

ROUTE_SEPARATOR = " → "
DEFAULT_TOP_PATTERNS = 10


def summarize_retries(retried: Iterable[RetriedTransaction]) -> RetrySummary:
    retried = list(retried)
    if not retried:
        return RetrySummary()

    successful = sum(1 for record in retried if record.final_status == "approved")
    attempts = [record.attempts for record in retried]

    return RetrySummary(
        total_retries=len(retried),
        successful_retries=successful,
        success_rate=percentage(successful, len(retried)),
        avg_attempts=round(sum(attempts) / len(attempts), 1),
        attempt_distribution=dict(sorted(Counter(attempts).items())),
    )


class _RescueTally:
    def __init__(self):
        self.approved = 0
        self.declined = 0
        self.countries: dict[str, None] = {}
        self.rescued_after: Counter[str] = Counter()
        self.rescued_by: Counter[str] = Counter()


def psp_rescue_stats(flows: Iterable[CrossPSPFlow]) -> list[PSPRescueStats]:
    """
    How often each PSP rescued a journey or was rescued by another.

    Sorted by total involvement, most involved first.
    """
    tallies: dict[str, _RescueTally] = {}

    for flow in flows:
        rescuer = tallies.setdefault(flow.approved_by, _RescueTally())
        rescuer.approved += 1
        rescuer.countries[flow.country] = None
        rescuer.rescued_after.update(flow.declined_by)

        for psp_name in flow.declined_by:
            decliner = tallies.setdefault(psp_name, _RescueTally())
            decliner.declined += 1
            decliner.countries[flow.country] = None
            decliner.rescued_by[flow.approved_by] += 1

    stats = []
    for psp_name, tally in tallies.items():
        involved = tally.approved + tally.declined
        stats.append(
            PSPRescueStats(
                psp_name=psp_name,
                times_approved=tally.approved,
                times_declined=tally.declined,
                total_involved=involved,
                approval_rate=percentage(tally.approved, involved),
                decline_rate=percentage(tally.declined, involved),
                countries=tuple(tally.countries),
                rescued_after=dict(tally.rescued_after.most_common()),
                rescued_by=dict(tally.rescued_by.most_common()),
            )
        )

    return sorted(stats, key=lambda entry: entry.total_involved, reverse=True)


def routing_pattern(flow: CrossPSPFlow) -> str:
    """
    Route label: sorted declining PSPs, then the approver.

    Example:
        "Adyen → Stripe → Paysafe" for declined_by=("Stripe", "Adyen"),
        approved_by="Paysafe"
    """
    return ROUTE_SEPARATOR.join([*sorted(flow.declined_by), flow.approved_by])


def routing_patterns(
    flows: Iterable[CrossPSPFlow],
    limit: int = DEFAULT_TOP_PATTERNS,
) -> list[RoutingPattern]:
    """Most frequent routes, with the share of all flows they account for."""
    flows = list(flows)

    counts: Counter[str] = Counter()
    countries: dict[str, set[str]] = {}
    for flow in flows:
        pattern = routing_pattern(flow)
        counts[pattern] += 1
        countries.setdefault(pattern, set()).add(flow.country)

    return [
        RoutingPattern(
            pattern=pattern,
            count=count,
            countries=len(countries[pattern]),
            frequency=rounded_percentage(count, len(flows)),
        )
        for pattern, count in counts.most_common(limit)
    ]


def summarize_decline_reasons(reasons: Iterable[DeclineReason]) -> DeclineSummary:
    reasons = list(reasons)
    total = sum(reason.count for reason in reasons)
    hard = sum(reason.count for reason in reasons if reason.type == "hard")
    soft = sum(reason.count for reason in reasons if reason.type == "soft")

    return DeclineSummary(
        total_declines=total,
        hard_declines=hard,
        soft_declines=soft,
        hard_decline_rate=percentage(hard, total),
        soft_decline_rate=percentage(soft, total),
        unique_reasons=len(reasons),
    )
