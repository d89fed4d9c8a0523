"""
Enumerations shared by the analysis models.
"""

from enum import Enum


class AttemptOutcome(str, Enum):
    """Category of a single attempt, resolved from its free-text status."""

    APPROVED = "approved"
    DECLINED = "declined"
    FILTERED = "filtered"
    OTHER = "other"


class JourneyStatus(str, Enum):
    """Final outcome of a journey: success iff any attempt approved."""

    SUCCESS = "success"
    FAILED = "failed"


class Granularity(str, Enum):
    """Bucket size for the time-series views."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: "str | Granularity") -> "Granularity":
        """
        Resolve a granularity from its name.

        Raises:
            ValueError: If the name is not daily, weekly or monthly
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown granularity '{value}'. Must be one of: "
                + ", ".join(g.value for g in cls)
            ) from None
