"""
Time-Bucketed Aggregator.

Journeys are bucketed by the UTC calendar day of their first dated row.
Weekly keys use the week formula consumers already depend on,
``ceil((day_of_year + jan1_weekday + 1) / 7)``, with ``day_of_year``
counted from 0 and ``jan1_weekday`` 0 for Sunday. It is close to, but not
the same as, ISO 8601 week numbering; ``date.isocalendar()`` gives
different labels and must not replace it.
"""

import math
from datetime import date, datetime, timezone
from typing import Callable, Iterable

from psp_analytics.core.models import (
    Granularity,
    Journey,
    JourneyStatus,
    PSPBucketStats,
    TimeAnalysis,
    TimeBucket,
)
from psp_analytics.observability.logger import get_logger

from .unique_counting import count_journey_outcomes, count_unique_by_psp, rounded_percentage

logger = get_logger(__name__)


def _utc_date(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(timezone.utc).date()


def daily_key(value: datetime) -> str:
    return _utc_date(value).strftime("%Y-%m-%d")


def weekly_key(value: datetime) -> str:
    """
    Week label ``YYYY-Www``.

    Examples:
        >>> weekly_key(datetime(2024, 1, 6))
        '2024-W01'
        >>> weekly_key(datetime(2024, 1, 7))
        '2024-W02'
    """
    day = _utc_date(value)
    jan1 = date(day.year, 1, 1)
    day_of_year = (day - jan1).days
    # Sunday = 0 ... Saturday = 6
    jan1_weekday = (jan1.weekday() + 1) % 7
    week = math.ceil((day_of_year + jan1_weekday + 1) / 7)
    return f"{day.year}-W{week:02d}"


def monthly_key(value: datetime) -> str:
    return _utc_date(value).strftime("%Y-%m")


PERIOD_KEYS: dict[Granularity, Callable[[datetime], str]] = {
    Granularity.DAILY: daily_key,
    Granularity.WEEKLY: weekly_key,
    Granularity.MONTHLY: monthly_key,
}


def period_key(value: datetime, granularity: Granularity | str) -> str:
    return PERIOD_KEYS[Granularity.parse(granularity)](value)


def dated_journey(journey: Journey) -> Journey | None:
    """
    The journey rebuilt from its dated attempts only, keyed by its first
    dated row.

    Undated attempts take no part in a time bucket: a decline on Monday
    followed by an undated approval is a declined journey for Monday.
    Returns None when no attempt of the journey carries a timestamp.
    """
    if journey.first_dated_at is None:
        return None

    # Sorted attempts keep undated ones last, so the dated prefix stays in order
    attempts = tuple(
        attempt.model_copy(update={"position": index + 1})
        for index, attempt in enumerate(
            attempt for attempt in journey.attempts if attempt.timestamp is not None
        )
    )
    approving = next((attempt for attempt in attempts if attempt.is_approved), None)

    return journey.model_copy(update={
        "attempts": attempts,
        "final_status": JourneyStatus.SUCCESS if approving else JourneyStatus.FAILED,
        "total_attempts": len(attempts),
        "psps_involved": tuple(dict.fromkeys(attempt.psp_name for attempt in attempts)),
        "approved_by": approving.psp_name if approving else None,
        "date": journey.first_dated_at,
        "has_valid_date": True,
    })


class TimeBucketedAggregator:
    """
    Aggregates journeys per period with the same counting rules as the
    PSP and country views.

    Each journey is bucketed by its first dated row and counted over its
    dated attempts only. Journeys without any dated row still count
    everywhere else.

    Args:
        include_psp_breakdown: Attach per-PSP unique counts to every bucket
    """

    def __init__(self, include_psp_breakdown: bool = True):
        self.include_psp_breakdown = include_psp_breakdown

    def aggregate(
        self,
        journeys: Iterable[Journey],
        granularity: Granularity | str,
    ) -> list[TimeBucket]:
        """
        Buckets for one granularity, sorted by period key.

        Raises:
            ValueError: If ``granularity`` is not daily, weekly or monthly
        """
        key_of = PERIOD_KEYS[Granularity.parse(granularity)]

        grouped: dict[str, list[Journey]] = {}
        for journey in journeys:
            dated = dated_journey(journey)
            if dated is None:
                continue
            grouped.setdefault(key_of(dated.date), []).append(dated)

        return [self._bucket(key, grouped[key]) for key in sorted(grouped)]

    def analyze(self, journeys: Iterable[Journey]) -> TimeAnalysis:
        """Daily, weekly and monthly buckets in one pass over the journeys."""
        journeys = list(journeys)
        undated = sum(1 for journey in journeys if journey.first_dated_at is None)
        if undated:
            logger.debug(
                f"{undated} journeys without a valid date left out of time buckets",
                extra={"undated_journeys": undated}
            )

        return TimeAnalysis(
            daily=self.aggregate(journeys, Granularity.DAILY),
            weekly=self.aggregate(journeys, Granularity.WEEKLY),
            monthly=self.aggregate(journeys, Granularity.MONTHLY),
        )

    def _bucket(self, key: str, journeys: list[Journey]) -> TimeBucket:
        outcomes = count_journey_outcomes(journeys)

        psp_breakdown = None
        if self.include_psp_breakdown:
            psp_breakdown = {
                psp_name: PSPBucketStats(
                    total=counts.total,
                    approved=counts.approved,
                    declined=counts.declined,
                    approval_ratio=rounded_percentage(counts.approved, counts.total),
                )
                for psp_name, counts in count_unique_by_psp(journeys).items()
            }

        return TimeBucket(
            period_key=key,
            total=outcomes.total,
            approved=outcomes.approved,
            declined=outcomes.declined,
            approval_rate=rounded_percentage(outcomes.approved, outcomes.total),
            psp_breakdown=psp_breakdown,
        )
