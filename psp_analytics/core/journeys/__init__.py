"""
Journey reconstruction from raw transaction rows.
"""

from .builder import JourneyBuilder
from .defaults import (
    UNKNOWN_LABEL,
    UNKNOWN_ORDER_KEY,
    UNKNOWN_STATUS,
    normalize_label,
    resolve_order_key,
    resolve_transaction,
)

__all__ = [
    "JourneyBuilder",
    "UNKNOWN_LABEL",
    "UNKNOWN_ORDER_KEY",
    "UNKNOWN_STATUS",
    "normalize_label",
    "resolve_order_key",
    "resolve_transaction",
]
