"""
Core data models for PSP journey analysis.

All models use Pydantic for runtime validation; derived models are frozen
so an analysis result can be shared as an immutable snapshot.
"""

from .analysis_result import AnalysisResult
from .country_metrics import (
    CountryBreakdown,
    CountryPSPBreakdown,
    ExclusionTotals,
    TransactionLevelMetrics,
)
from .enums import AttemptOutcome, Granularity, JourneyStatus
from .flows import (
    CrossPSPFlow,
    DeclineReason,
    DeclineSummary,
    PSPRescueStats,
    RetriedTransaction,
    RetrySummary,
    RoutingPattern,
)
from .journey import Attempt, Journey
from .psp_metrics import PSPLevelMetrics, PSPStats
from .ratio_stats import BestPSP, CountryRatioStats, JourneyRatioView, RatioStats
from .time_series import PSPBucketStats, TimeAnalysis, TimeBucket
from .transaction import Transaction, parse_processing_date

__all__ = [
    "AnalysisResult",
    "Attempt",
    "AttemptOutcome",
    "BestPSP",
    "CountryBreakdown",
    "CountryPSPBreakdown",
    "CountryRatioStats",
    "CrossPSPFlow",
    "DeclineReason",
    "DeclineSummary",
    "ExclusionTotals",
    "Granularity",
    "Journey",
    "JourneyRatioView",
    "JourneyStatus",
    "PSPBucketStats",
    "PSPLevelMetrics",
    "PSPRescueStats",
    "PSPStats",
    "RatioStats",
    "RetriedTransaction",
    "RetrySummary",
    "RoutingPattern",
    "TimeAnalysis",
    "TimeBucket",
    "Transaction",
    "TransactionLevelMetrics",
    "parse_processing_date",
]
