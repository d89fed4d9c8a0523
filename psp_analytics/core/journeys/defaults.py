"""
Default resolution for missing or blank transaction fields.

Every fallback the analysis relies on is decided here, once per row,
before journeys are built. Consumers never see a missing PSP, country,
status or order key.
"""

from dataclasses import dataclass, field
from datetime import datetime

from psp_analytics.core.models import Transaction

UNKNOWN_ORDER_KEY = "unknown"
UNKNOWN_LABEL = "Unknown"
UNKNOWN_STATUS = "unknown"


def _present(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def resolve_order_key(tx: Transaction) -> str:
    """merchantOrderId, else transactionId, else the literal "unknown"."""
    return _present(tx.merchant_order_id) or _present(tx.transaction_id) or UNKNOWN_ORDER_KEY


def normalize_label(value: str | None) -> str:
    """Trimmed PSP or country name; blank or missing becomes "Unknown"."""
    return _present(value) or UNKNOWN_LABEL


def resolve_status(tx: Transaction) -> str:
    return tx.status or UNKNOWN_STATUS


@dataclass
class ResolvedRow:
    """A transaction with every default applied."""

    order_key: str
    transaction_id: str
    psp_name: str
    country: str
    status: str
    processing_date: datetime | None
    amount: float | None
    currency: str | None
    decline_reason: str | None
    defaulted: list[str] = field(default_factory=list)


def resolve_transaction(tx: Transaction) -> ResolvedRow:
    """
    Apply all defaults to one transaction.

    ``defaulted`` lists the fields that fell back to a default, for
    logging and metrics only.
    """
    order_key = resolve_order_key(tx)
    defaulted = []
    if _present(tx.merchant_order_id) is None and _present(tx.transaction_id) is None:
        defaulted.append("order_key")
    if _present(tx.psp_name) is None:
        defaulted.append("psp_name")
    if _present(tx.country) is None:
        defaulted.append("country")
    if not tx.status:
        defaulted.append("status")
    if tx.processing_date is None:
        defaulted.append("processing_date")

    return ResolvedRow(
        order_key=order_key,
        transaction_id=_present(tx.transaction_id) or order_key,
        psp_name=normalize_label(tx.psp_name),
        country=normalize_label(tx.country),
        status=resolve_status(tx),
        processing_date=tx.processing_date,
        amount=tx.amount,
        currency=_present(tx.currency),
        decline_reason=_present(tx.decline_reason),
        defaulted=defaulted,
    )
