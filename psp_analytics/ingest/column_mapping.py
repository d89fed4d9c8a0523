"""
Header-to-field mapping for transaction CSV exports.

Exports from different PSP back offices name the same column differently
("pspName", "psp_name", "provider"...). Each Transaction field is bound to
the first header containing one of its candidate names.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from psp_analytics.core.models import Transaction

# Transaction field alias -> candidate header names, checked in order
COLUMN_CANDIDATES: dict[str, tuple[str, ...]] = {
    "transactionId": ("transactionId", "transaction_id", "id"),
    "merchantOrderId": ("merchantOrderId", "merchant_order_id", "orderId", "order_id"),
    "pspName": ("pspName", "psp_name", "psp", "provider"),
    "country": ("country", "country_code"),
    "status": ("status", "transaction_status"),
    "merchantAmount": ("merchantAmount", "merchant_amount", "amount"),
    "currency": ("currency", "currency_code"),
    "processing_date": ("processing_date", "date", "timestamp", "created_at"),
    "declineReason": ("declineReason", "decline_reason", "reason"),
}


def clean_value(value: Any) -> str | None:
    """Trimmed text with double quotes removed; empty becomes None."""
    if value is None:
        return None
    text = str(value).strip().replace('"', "")
    return text or None


def find_column(headers: Iterable[str], candidates: Iterable[str]) -> str | None:
    """
    First header whose lower-cased text contains a candidate.

    Candidates are tried in order, so an earlier candidate wins even when a
    later one matches an earlier header.

    Examples:
        >>> find_column(["Order ID", "PSP Name"], ["psp", "provider"])
        'PSP Name'
    """
    headers = list(headers)
    for candidate in candidates:
        needle = candidate.lower()
        for header in headers:
            if needle in header.lower():
                return header
    return None


@dataclass(frozen=True)
class ColumnMapping:
    """
    Resolved source header per Transaction field (None when absent).

    Attributes:
        columns: Transaction field alias -> source header
    """

    columns: Mapping[str, str | None]

    @classmethod
    def from_headers(cls, headers: Iterable[str]) -> "ColumnMapping":
        headers = [clean_value(header) or "" for header in headers]
        return cls(columns={
            field_name: find_column(headers, candidates)
            for field_name, candidates in COLUMN_CANDIDATES.items()
        })

    @property
    def missing(self) -> list[str]:
        """Fields without a matching header."""
        return [name for name, header in self.columns.items() if header is None]

    def to_transaction(self, row: Mapping[str, Any]) -> Transaction:
        """
        Build a Transaction from one row keyed by source header.

        Cleaned-empty values are left out; malformed amounts and dates
        degrade to None inside Transaction.
        """
        values = {}
        for field_name, header in self.columns.items():
            if header is None:
                continue
            value = clean_value(row.get(header))
            if value is not None:
                values[field_name] = value
        return Transaction.model_validate(values)
