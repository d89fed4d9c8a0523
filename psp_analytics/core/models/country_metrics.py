"""
Country-level (transaction-level) metrics derived from journeys.
"""

from pydantic import Field

from .base import AnalysisModel


class CountryPSPBreakdown(AnalysisModel):
    """Unique-counting stats for one PSP scoped to one country."""

    approved_transactions: int = 0
    declined_transactions: int = 0
    total_transactions: int = 0
    success_rate: float = 0.0


class CountryBreakdown(AnalysisModel):
    """
    Journeys of one country, each counted once by its final status.

    Attributes:
        total_approved_transactions: Successful journeys
        total_unique_declined_transactions: Failed journeys
        total_processed_transactions: All journeys of the country
        success_rate: approved / processed x 100
        psp_breakdown: Per-PSP unique counts within the country
    """

    total_approved_transactions: int = 0
    total_unique_declined_transactions: int = 0
    total_processed_transactions: int = 0
    success_rate: float = 0.0
    psp_breakdown: dict[str, CountryPSPBreakdown] = Field(default_factory=dict)


class TransactionLevelMetrics(AnalysisModel):
    """Country breakdown plus totals where every journey counts exactly once."""

    country_breakdown: dict[str, CountryBreakdown] = Field(default_factory=dict)
    total_approved_transactions: int = 0
    total_unique_declined_transactions: int = 0
    total_processed_transactions: int = 0
    weighted_success_rate: float = 0.0


class ExclusionTotals(AnalysisModel):
    """
    Transaction-level totals recomputed as if some PSPs never existed.

    Attributes:
        excluded_psps: PSP names removed from every journey, sorted
    """

    total_approved_transactions: int = 0
    total_unique_declined_transactions: int = 0
    total_processed_transactions: int = 0
    weighted_success_rate: float = 0.0
    excluded_psps: tuple[str, ...] = ()
