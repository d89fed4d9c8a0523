"""
Journey Builder: groups raw attempts into per-order journeys.

Construction is two-pass. The first pass walks the transactions once,
creating a draft per order key on first sight (seeded with that row's
country, transaction id and date) and appending every attempt. The second
pass, once all rows are known, sorts each draft's attempts by timestamp,
assigns positions and derives the journey-level fields.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable

from psp_analytics.core.models import Attempt, Journey, JourneyStatus, Transaction
from psp_analytics.core.status import StatusClassifier
from psp_analytics.observability.logger import get_logger
from psp_analytics.observability.metrics import record_journeys_built

from .defaults import ResolvedRow, resolve_transaction

logger = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _JourneyDraft:
    order_key: str
    transaction_id: str
    country: str
    date: datetime | None
    first_dated_at: datetime | None = None
    rows: list[ResolvedRow] = field(default_factory=list)


class JourneyBuilder:
    """
    Builds immutable Journey objects from Transaction rows.

    Args:
        classifier: Status classifier deciding which attempts approve
        clock: Source of "now" for journeys whose first row has no date
    """

    def __init__(
        self,
        classifier: StatusClassifier | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.classifier = classifier or StatusClassifier()
        self.clock = clock

    def build(self, transactions: Iterable[Transaction]) -> dict[str, Journey]:
        """
        Reconstruct journeys keyed by merchant order key.

        No row is dropped: missing fields degrade to defaults. The order of
        ``transactions`` only matters as a tiebreak between attempts of
        the same journey without a timestamp.

        Args:
            transactions: Raw attempt rows

        Returns:
            Journeys in order of first appearance of their key
        """
        drafts: dict[str, _JourneyDraft] = {}
        defaulted: Counter[str] = Counter()
        row_count = 0

        for tx in transactions:
            row = resolve_transaction(tx)
            row_count += 1
            defaulted.update(row.defaulted)

            draft = drafts.get(row.order_key)
            if draft is None:
                draft = _JourneyDraft(
                    order_key=row.order_key,
                    transaction_id=row.transaction_id,
                    country=row.country,
                    date=row.processing_date,
                )
                drafts[row.order_key] = draft
            if draft.first_dated_at is None:
                draft.first_dated_at = row.processing_date
            draft.rows.append(row)

        built_at = self.clock()
        journeys = {key: self._finalize(draft, built_at) for key, draft in drafts.items()}

        successful = sum(1 for journey in journeys.values() if journey.is_successful)
        record_journeys_built(
            transaction_count=row_count,
            successful_journeys=successful,
            failed_journeys=len(journeys) - successful,
            defaulted_fields=dict(defaulted),
        )
        if defaulted:
            logger.debug(
                "Defaulted missing transaction fields",
                extra={"defaulted_fields": dict(defaulted)}
            )
        logger.info(
            f"Built {len(journeys)} journeys from {row_count} transactions",
            extra={"journeys": len(journeys), "transactions": row_count, "successful": successful}
        )
        return journeys

    def _finalize(self, draft: _JourneyDraft, built_at: datetime) -> Journey:
        # Stable sort keeps input order between attempts lacking a timestamp
        rows = sorted(
            draft.rows,
            key=lambda row: (row.processing_date is None, row.processing_date or _EPOCH),
        )

        attempts = tuple(
            Attempt(
                psp_name=row.psp_name,
                status=row.status,
                outcome=self.classifier.categorize(row.status),
                timestamp=row.processing_date,
                amount=row.amount,
                currency=row.currency,
                decline_reason=row.decline_reason,
                position=index + 1,
            )
            for index, row in enumerate(rows)
        )

        approving = next((attempt for attempt in attempts if attempt.is_approved), None)

        return Journey(
            merchant_order_id=draft.order_key,
            transaction_id=draft.transaction_id,
            country=draft.country,
            attempts=attempts,
            final_status=JourneyStatus.SUCCESS if approving else JourneyStatus.FAILED,
            total_attempts=len(attempts),
            psps_involved=tuple(dict.fromkeys(attempt.psp_name for attempt in attempts)),
            approved_by=approving.psp_name if approving else None,
            date=draft.date or built_at,
            has_valid_date=draft.date is not None,
            first_dated_at=draft.first_dated_at,
        )
