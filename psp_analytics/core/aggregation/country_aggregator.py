"""
Country-level aggregation: every journey counts exactly once.
"""

from typing import Iterable

from psp_analytics.core.models import (
    CountryBreakdown,
    CountryPSPBreakdown,
    Journey,
    TransactionLevelMetrics,
)

from .unique_counting import (
    count_journey_outcomes,
    count_unique_by_psp,
    group_by_country,
    percentage,
)


class CountryAggregator:
    """
    Groups journeys by country and counts each by its final status.

    A journey's country is the country of its first row; mixed-country
    journeys are not detected.
    """

    def aggregate(self, journeys: Iterable[Journey]) -> TransactionLevelMetrics:
        country_breakdown: dict[str, CountryBreakdown] = {}

        for country, country_journeys in group_by_country(journeys).items():
            outcomes = count_journey_outcomes(country_journeys)
            psp_breakdown = {
                psp_name: CountryPSPBreakdown(
                    approved_transactions=counts.approved,
                    declined_transactions=counts.declined,
                    total_transactions=counts.total,
                    success_rate=percentage(counts.approved, counts.total),
                )
                for psp_name, counts in count_unique_by_psp(country_journeys).items()
            }
            country_breakdown[country] = CountryBreakdown(
                total_approved_transactions=outcomes.approved,
                total_unique_declined_transactions=outcomes.declined,
                total_processed_transactions=outcomes.total,
                success_rate=percentage(outcomes.approved, outcomes.total),
                psp_breakdown=psp_breakdown,
            )

        total_approved = sum(c.total_approved_transactions for c in country_breakdown.values())
        total_declined = sum(c.total_unique_declined_transactions for c in country_breakdown.values())
        total_processed = total_approved + total_declined

        return TransactionLevelMetrics(
            country_breakdown=country_breakdown,
            total_approved_transactions=total_approved,
            total_unique_declined_transactions=total_declined,
            total_processed_transactions=total_processed,
            weighted_success_rate=percentage(total_approved, total_processed),
        )
