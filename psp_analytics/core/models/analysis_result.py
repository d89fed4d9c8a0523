"""
AnalysisResult: the full, immutable output of one analysis invocation.
"""

from typing import Any

from pydantic import Field

from .base import AnalysisModel
from .country_metrics import TransactionLevelMetrics
from .flows import (
    CrossPSPFlow,
    DeclineReason,
    DeclineSummary,
    PSPRescueStats,
    RetriedTransaction,
    RetrySummary,
    RoutingPattern,
)
from .journey import Journey
from .psp_metrics import PSPLevelMetrics
from .ratio_stats import BestPSP, JourneyRatioView, RatioStats
from .time_series import TimeAnalysis


class AnalysisResult(AnalysisModel):
    """
    Everything derived from one transaction list.

    The journeys are retained so PSP exclusions can be recalculated
    without re-reading the raw transactions.

    Attributes:
        total_transactions: Transaction rows consumed
        journeys: Journeys keyed by merchant order key
        psp_metrics: Per-PSP stats in both counting modes
        transaction_metrics: Per-country stats, one unit per journey
        journey_ratios: Journey-unique ratio view (2-decimal ratios)
        raw_attempt_ratios: Attempt ratio view (denominator includes filtered/other)
        time_analysis: Daily, weekly and monthly buckets
        retried_transactions: (journey, PSP) pairs with several attempts
        cross_psp_flows: Journeys rescued by another PSP
        decline_reasons: Decline text frequencies, most frequent first
        retry_summary: Roll-up of the retried transactions
        psp_rescue_stats: Per-PSP involvement in cross-PSP flows
        routing_patterns: Most frequent decline-then-approve routes
        decline_summary: Hard/soft split of the decline reasons
        best_psp_by_country: Highest journey-view ratio PSP per country
    """

    total_transactions: int = 0
    journeys: dict[str, Journey] = Field(default_factory=dict)
    psp_metrics: PSPLevelMetrics = Field(default_factory=PSPLevelMetrics)
    transaction_metrics: TransactionLevelMetrics = Field(default_factory=TransactionLevelMetrics)
    journey_ratios: JourneyRatioView = Field(default_factory=JourneyRatioView)
    raw_attempt_ratios: dict[str, RatioStats] = Field(default_factory=dict)
    time_analysis: TimeAnalysis = Field(default_factory=TimeAnalysis)
    retried_transactions: list[RetriedTransaction] = Field(default_factory=list)
    cross_psp_flows: list[CrossPSPFlow] = Field(default_factory=list)
    decline_reasons: list[DeclineReason] = Field(default_factory=list)
    retry_summary: RetrySummary = Field(default_factory=RetrySummary)
    psp_rescue_stats: list[PSPRescueStats] = Field(default_factory=list)
    routing_patterns: list[RoutingPattern] = Field(default_factory=list)
    decline_summary: DeclineSummary = Field(default_factory=DeclineSummary)
    best_psp_by_country: list[BestPSP] = Field(default_factory=list)

    @property
    def journey_count(self) -> int:
        return len(self.journeys)

    def summary(self, include_journeys: bool = False) -> dict[str, Any]:
        """
        JSON-serialisable view with camelCase keys.

        Journeys are left out unless requested; they dominate the size of
        the output for real files.
        """
        exclude = None if include_journeys else {"journeys"}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
