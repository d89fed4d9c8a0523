"""
Time-bucketed metrics.
"""

from pydantic import Field

from .base import AnalysisModel


class PSPBucketStats(AnalysisModel):
    """Unique-counting stats of one PSP within one period."""

    total: int = 0
    approved: int = 0
    declined: int = 0
    approval_ratio: float = 0.0


class TimeBucket(AnalysisModel):
    """
    Journey totals of one period.

    Attributes:
        period_key: YYYY-MM-DD, YYYY-Www or YYYY-MM
        total: Journeys dated in the period
        approved: Successful journeys
        declined: Failed journeys
        approval_rate: approved / total x 100, 2 decimals
        psp_breakdown: Per-PSP unique counts within the period
    """

    period_key: str
    total: int = 0
    approved: int = 0
    declined: int = 0
    approval_rate: float = 0.0
    psp_breakdown: dict[str, PSPBucketStats] | None = None


class TimeAnalysis(AnalysisModel):
    """Buckets at every granularity, each list sorted by period key."""

    daily: list[TimeBucket] = Field(default_factory=list)
    weekly: list[TimeBucket] = Field(default_factory=list)
    monthly: list[TimeBucket] = Field(default_factory=list)
