"""
Aggregation passes over built journeys.

Every pass is a pure function of the journey set: PSP and country
metrics, the two ratio views, time buckets, flow extraction and the
what-if exclusion totals.
"""

from .country_aggregator import CountryAggregator
from .exclusion import recalculate_with_exclusions, totals_without
from .flow_summary import (
    psp_rescue_stats,
    routing_pattern,
    routing_patterns,
    summarize_decline_reasons,
    summarize_retries,
)
from .flows import extract_cross_psp_flows, extract_retried_transactions, tally_decline_reasons
from .psp_aggregator import PSPAggregator
from .ratio_views import best_psp_by_country, journey_ratio_view, raw_attempt_ratios
from .time_buckets import (
    TimeBucketedAggregator,
    daily_key,
    dated_journey,
    monthly_key,
    period_key,
    weekly_key,
)
from .unique_counting import UniqueCounts, count_unique_by_psp, percentage

__all__ = [
    "CountryAggregator",
    "PSPAggregator",
    "TimeBucketedAggregator",
    "UniqueCounts",
    "best_psp_by_country",
    "count_unique_by_psp",
    "daily_key",
    "dated_journey",
    "extract_cross_psp_flows",
    "extract_retried_transactions",
    "journey_ratio_view",
    "monthly_key",
    "percentage",
    "period_key",
    "psp_rescue_stats",
    "raw_attempt_ratios",
    "recalculate_with_exclusions",
    "routing_pattern",
    "routing_patterns",
    "summarize_decline_reasons",
    "summarize_retries",
    "tally_decline_reasons",
    "totals_without",
    "weekly_key",
]
