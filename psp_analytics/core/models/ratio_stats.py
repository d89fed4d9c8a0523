"""
Ratio views: journey-unique ratios and raw attempt ratios.
"""

from pydantic import Field

from .base import AnalysisModel


class RatioStats(AnalysisModel):
    """
    Approved/declined/filtered/other counts with rounded ratios.

    Which denominator the ratios use depends on the view that produced the
    stats; see ``core.aggregation.ratio_views``.
    """

    total: int = 0
    approved: int = 0
    declined: int = 0
    filtered: int = 0
    other: int = 0
    approval_ratio: float = 0.0
    decline_ratio: float = 0.0


class CountryRatioStats(RatioStats):
    """Country ratio stats with a nested per-PSP breakdown."""

    psp_breakdown: dict[str, RatioStats] = Field(default_factory=dict)


class JourneyRatioView(AnalysisModel):
    """
    Journey-unique ratios per PSP and per country.

    Attributes:
        psp_analysis: Per-PSP stats, one unit per (journey, PSP)
        country_analysis: Per-country stats, one unit per journey
        overall_approval_rate: Approved over approved+declined summed over PSPs
    """

    psp_analysis: dict[str, RatioStats] = Field(default_factory=dict)
    country_analysis: dict[str, CountryRatioStats] = Field(default_factory=dict)
    overall_approval_rate: float = 0.0


class BestPSP(AnalysisModel):
    """Highest-ratio PSP of a country."""

    country: str
    best_psp: str
    approval_ratio: float
    total: int
