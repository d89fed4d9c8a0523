"""
Transaction model representing one raw attempt row from the ingestion layer.
"""

import math
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Layouts tried after ISO-8601; slash dates are month-first
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y",
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_processing_date(value: Any) -> datetime | None:
    """
    Parse a processing date into an aware UTC datetime.

    Naive values are taken to be UTC. Anything that cannot be parsed
    yields None instead of raising.

    Examples:
        >>> parse_processing_date("2024-03-05T10:00:00Z")
        datetime.datetime(2024, 3, 5, 10, 0, tzinfo=datetime.timezone.utc)
        >>> parse_processing_date("not a date") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


class Transaction(BaseModel):
    """
    One processing attempt as delivered by the CSV ingestion layer.

    No field is guaranteed to be present. Malformed values degrade to None
    rather than failing validation, so every row reaches journey building.

    Attributes:
        transaction_id: Identifier of this attempt
        merchant_order_id: Logical order key shared by retried attempts
        psp_name: Payment service provider that processed the attempt
        country: Country of the order
        status: Free-text status from the upstream system
        amount: Merchant amount (None when not a number)
        currency: Currency code
        processing_date: When the attempt was processed (UTC, None when unparseable)
        decline_reason: Decline reason text when the source provides one
    """

    transaction_id: str | None = Field(None, alias="transactionId")
    merchant_order_id: str | None = Field(None, alias="merchantOrderId")
    psp_name: str | None = Field(None, alias="pspName")
    country: str | None = None
    status: str | None = None
    amount: float | None = Field(None, alias="merchantAmount")
    currency: str | None = None
    processing_date: datetime | None = None
    decline_reason: str | None = Field(None, alias="declineReason")

    @field_validator(
        "transaction_id", "merchant_order_id", "psp_name", "country",
        "status", "currency", "decline_reason",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        """Numbers and other scalars from loosely typed sources become text."""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        """Unparseable or non-finite amounts become None."""
        if v is None or isinstance(v, bool):
            return None
        try:
            amount = float(v)
        except (TypeError, ValueError):
            return None
        return amount if math.isfinite(amount) else None

    @field_validator("processing_date", mode="before")
    @classmethod
    def coerce_processing_date(cls, v):
        return parse_processing_date(v)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "transactionId": "TX-1001",
                "merchantOrderId": "ORD-77",
                "pspName": "Paysafe",
                "country": "DE",
                "status": "credit_card_declined",
                "merchantAmount": 49.9,
                "currency": "EUR",
                "processing_date": "2024-03-05T10:00:00Z",
            }
        }
