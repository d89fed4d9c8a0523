"""
Two ratio views kept side by side.

``journey_ratio_view`` counts each journey once (per PSP with the unique
counting rule, per country by final status) and divides by
approved + declined. ``raw_attempt_ratios`` counts every attempt row and
divides by the row total, filtered and other rows included. The views
answer different questions and are reported separately.
"""

from typing import Iterable

from psp_analytics.core.models import (
    AttemptOutcome,
    BestPSP,
    CountryRatioStats,
    Journey,
    JourneyRatioView,
    RatioStats,
)

from .unique_counting import (
    UniqueCounts,
    count_journey_outcomes,
    count_unique_by_psp,
    group_by_country,
    rounded_percentage,
)

DEFAULT_MIN_TRANSACTIONS = 5


def _journey_ratio_stats(counts: UniqueCounts) -> RatioStats:
    return RatioStats(
        total=counts.total,
        approved=counts.approved,
        declined=counts.declined,
        approval_ratio=rounded_percentage(counts.approved, counts.total),
        decline_ratio=rounded_percentage(counts.declined, counts.total),
    )


def journey_ratio_view(journeys: Iterable[Journey]) -> JourneyRatioView:
    """
    Journey-unique ratios per PSP and per country.

    Ratios are approved / (approved + declined) x 100 rounded to 2
    decimals. Every journey resolves to approved or declined in this view,
    so ``filtered`` and ``other`` stay 0.
    """
    journeys = list(journeys)

    psp_counts = count_unique_by_psp(journeys)
    psp_analysis = {
        psp_name: _journey_ratio_stats(counts) for psp_name, counts in psp_counts.items()
    }

    country_analysis = {}
    for country, country_journeys in group_by_country(journeys).items():
        counts = count_journey_outcomes(country_journeys)
        base = _journey_ratio_stats(counts)
        country_analysis[country] = CountryRatioStats(
            **base.model_dump(),
            psp_breakdown={
                psp_name: _journey_ratio_stats(psp_country_counts)
                for psp_name, psp_country_counts in count_unique_by_psp(country_journeys).items()
            },
        )

    total_approved = sum(stats.approved for stats in psp_analysis.values())
    total_declined = sum(stats.declined for stats in psp_analysis.values())

    return JourneyRatioView(
        psp_analysis=psp_analysis,
        country_analysis=country_analysis,
        overall_approval_rate=rounded_percentage(total_approved, total_approved + total_declined),
    )


def raw_attempt_ratios(journeys: Iterable[Journey]) -> dict[str, RatioStats]:
    """
    Attempt-level ratios per PSP.

    Every attempt row counts, retries included, and the denominator is the
    row total including filtered and other rows:

        approval_ratio = approved / total x 100
        decline_ratio  = declined / total x 100
    """
    tallies: dict[str, dict[AttemptOutcome, int]] = {}
    for journey in journeys:
        for attempt in journey.attempts:
            tally = tallies.setdefault(attempt.psp_name, dict.fromkeys(AttemptOutcome, 0))
            tally[attempt.outcome] += 1

    ratios = {}
    for psp_name, tally in tallies.items():
        total = sum(tally.values())
        approved = tally[AttemptOutcome.APPROVED]
        declined = tally[AttemptOutcome.DECLINED]
        ratios[psp_name] = RatioStats(
            total=total,
            approved=approved,
            declined=declined,
            filtered=tally[AttemptOutcome.FILTERED],
            other=tally[AttemptOutcome.OTHER],
            approval_ratio=rounded_percentage(approved, total),
            decline_ratio=rounded_percentage(declined, total),
        )
    return ratios


def best_psp_by_country(
    view: JourneyRatioView,
    selected_psps: Iterable[str] | None = None,
    min_transactions: int = DEFAULT_MIN_TRANSACTIONS,
) -> list[BestPSP]:
    """
    Highest journey-view approval ratio per country.

    Args:
        view: Journey ratio view to read the per-country PSP breakdown from
        selected_psps: Only consider these PSPs (all when None)
        min_transactions: Minimum journeys a PSP needs in a country to qualify

    Returns:
        One entry per country with a qualifying PSP, best ratio first.
        Ties keep the PSP seen first.
    """
    selected = set(selected_psps) if selected_psps is not None else None

    best = []
    for country, country_stats in view.country_analysis.items():
        candidate: tuple[str, RatioStats] | None = None
        for psp_name, stats in country_stats.psp_breakdown.items():
            if selected is not None and psp_name not in selected:
                continue
            if stats.total < min_transactions:
                continue
            if candidate is None or stats.approval_ratio > candidate[1].approval_ratio:
                candidate = (psp_name, stats)
        if candidate is not None:
            psp_name, stats = candidate
            best.append(
                BestPSP(
                    country=country,
                    best_psp=psp_name,
                    approval_ratio=stats.approval_ratio,
                    total=stats.total,
                )
            )

    return sorted(best, key=lambda entry: entry.approval_ratio, reverse=True)
