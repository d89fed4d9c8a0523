"""
PSP-level metrics derived from journeys.
"""

from pydantic import Field

from .base import AnalysisModel


class PSPStats(AnalysisModel):
    """
    Per-PSP statistics in both counting modes.

    Attempt counts (``total_attempts``, ``approved_attempts``,
    ``declined_attempts``) include every retry. Unique counts attribute each
    journey at most once to a PSP. The two modes are never mixed in a rate:
    ``individual_approval_rate`` uses attempts, ``true_approval_rate`` uses
    unique journeys.

    Attributes:
        total_attempts: Every attempt row processed by the PSP
        approved_attempts: Attempt rows classified approved
        declined_attempts: Attempt rows classified declined
        unique_approved: Journeys where the PSP approved at least once
        unique_declined: Journeys the PSP took part in without approving
        individual_approval_rate: approved_attempts / total_attempts x 100
        true_approval_rate: unique_approved / (unique_approved + unique_declined) x 100
        avg_position: Mean 1-based position of the PSP's attempts
    """

    total_attempts: int = Field(0, ge=0)
    approved_attempts: int = Field(0, ge=0)
    declined_attempts: int = Field(0, ge=0)
    unique_approved: int = Field(0, ge=0)
    unique_declined: int = Field(0, ge=0)
    individual_approval_rate: float = Field(0.0, ge=0.0, le=100.0)
    true_approval_rate: float = Field(0.0, ge=0.0, le=100.0)
    avg_position: float = Field(0.0, ge=0.0)

    @property
    def unique_total(self) -> int:
        return self.unique_approved + self.unique_declined


class PSPLevelMetrics(AnalysisModel):
    """
    All PSP stats plus totals summed over PSPs.

    A journey that visited several PSPs contributes once to each of them,
    so these totals count (journey, PSP) pairs.
    """

    psp_stats: dict[str, PSPStats] = Field(default_factory=dict)
    total_approved_transactions: int = 0
    total_unique_declined_transactions: int = 0
    total_processed_transactions: int = 0
    weighted_success_rate: float = 0.0
