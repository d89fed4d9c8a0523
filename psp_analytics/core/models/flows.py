"""
Retry, cross-PSP flow and decline reason records.
"""

from typing import Literal

from pydantic import Field

from .base import AnalysisModel


class RetriedTransaction(AnalysisModel):
    """
    A (journey, PSP) pair with more than one attempt.

    Attributes:
        merchant_order_id: Journey key
        psp_name: PSP that was retried
        attempts: Number of attempts by that PSP in the journey
        final_status: "approved" when the journey succeeded, else "declined"
        country: Journey country
    """

    merchant_order_id: str
    psp_name: str
    attempts: int = Field(..., ge=2)
    final_status: Literal["approved", "declined"]
    country: str


class CrossPSPFlow(AnalysisModel):
    """
    A successful journey rescued by one PSP after others declined.

    Attributes:
        merchant_order_id: Journey key
        approved_by: PSP of the first approving attempt
        declined_by: Other PSPs with at least one non-approving attempt
        country: Journey country
        amount: Amount of the approving attempt
        currency: Currency of the approving attempt
    """

    merchant_order_id: str
    approved_by: str
    declined_by: tuple[str, ...] = Field(..., min_length=1)
    country: str
    amount: float | None = None
    currency: str | None = None


class DeclineReason(AnalysisModel):
    """Frequency of one exact decline text."""

    reason: str
    count: int = Field(..., ge=1)
    type: Literal["hard", "soft"] | None = None


class RetrySummary(AnalysisModel):
    """Roll-up of retried-transaction records."""

    total_retries: int = 0
    successful_retries: int = 0
    success_rate: float = 0.0
    avg_attempts: float = 0.0
    attempt_distribution: dict[int, int] = Field(default_factory=dict)


class PSPRescueStats(AnalysisModel):
    """
    How a PSP behaves across cross-PSP flows.

    Attributes:
        times_approved: Flows this PSP rescued
        times_declined: Flows this PSP declined before another PSP rescued
        rescued_after: PSPs this one rescued, with counts
        rescued_by: PSPs that rescued this one, with counts
    """

    psp_name: str
    times_approved: int = 0
    times_declined: int = 0
    total_involved: int = 0
    approval_rate: float = 0.0
    decline_rate: float = 0.0
    countries: tuple[str, ...] = ()
    rescued_after: dict[str, int] = Field(default_factory=dict)
    rescued_by: dict[str, int] = Field(default_factory=dict)


class RoutingPattern(AnalysisModel):
    """A declining-PSPs-then-approver route and how often it occurred."""

    pattern: str
    count: int
    countries: int
    frequency: float


class DeclineSummary(AnalysisModel):
    """Hard/soft split over all tallied decline reasons."""

    total_declines: int = 0
    hard_declines: int = 0
    soft_declines: int = 0
    hard_decline_rate: float = 0.0
    soft_decline_rate: float = 0.0
    unique_reasons: int = 0
