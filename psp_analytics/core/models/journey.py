"""
Journey and Attempt models: the reconstructed routing history of one order.
"""

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .enums import AttemptOutcome, JourneyStatus


class Attempt(BaseModel):
    """
    One PSP processing try within a journey.

    Attributes:
        psp_name: PSP that processed the attempt ("Unknown" when blank)
        status: Raw status text ("unknown" when blank)
        outcome: Category resolved from the status when the journey was built
        timestamp: Processing time, None when the row had no usable date
        amount: Merchant amount
        currency: Currency code
        decline_reason: Decline reason column, when present
        position: 1-based position after sorting the journey's attempts by time
    """

    psp_name: str
    status: str
    outcome: AttemptOutcome
    timestamp: datetime | None = None
    amount: float | None = None
    currency: str | None = None
    decline_reason: str | None = None
    position: int = Field(..., ge=1)

    @property
    def is_approved(self) -> bool:
        return self.outcome is AttemptOutcome.APPROVED

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


class Journey(BaseModel):
    """
    All attempts sharing a merchant order key, in processing order.

    Journeys are immutable once built; every analysis pass and what-if
    recalculation reads the same instances.

    Attributes:
        merchant_order_id: Order key (merchantOrderId, else transactionId, else "unknown")
        transaction_id: transactionId of the first row seen for the order
        country: Country of the first row seen for the order
        attempts: Attempts sorted by timestamp, undated attempts last
        final_status: success iff any attempt approved
        total_attempts: Number of attempts
        psps_involved: Distinct PSP names in order of first appearance
        approved_by: PSP of the first approving attempt, if any
        date: First row's processing date, or build time when it had none
        has_valid_date: Whether ``date`` came from the data
        first_dated_at: Processing date of the first row, in input order, that
            had one; None when no row of the order is dated
    """

    merchant_order_id: str
    transaction_id: str
    country: str
    attempts: tuple[Attempt, ...]
    final_status: JourneyStatus
    total_attempts: int
    psps_involved: tuple[str, ...]
    approved_by: str | None = None
    date: datetime
    has_valid_date: bool = True
    first_dated_at: datetime | None = None

    @property
    def is_successful(self) -> bool:
        return self.final_status is JourneyStatus.SUCCESS

    def attempts_by(self, psp_name: str) -> list[Attempt]:
        """Attempts processed by one PSP, in journey order."""
        return [attempt for attempt in self.attempts if attempt.psp_name == psp_name]

    def psp_approved(self, psp_name: str) -> bool:
        """True when at least one attempt by ``psp_name`` approved this journey."""
        return any(
            attempt.psp_name == psp_name and attempt.is_approved
            for attempt in self.attempts
        )

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True
