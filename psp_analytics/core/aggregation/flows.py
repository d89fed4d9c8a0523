"""
Flow/Retry Extractor: retries, cross-PSP rescues and decline reasons.
"""

from collections import Counter
from typing import Iterable

from psp_analytics.core.models import (
    AttemptOutcome,
    CrossPSPFlow,
    DeclineReason,
    Journey,
    RetriedTransaction,
)
from psp_analytics.core.status import StatusClassifier


def extract_retried_transactions(journeys: Iterable[Journey]) -> list[RetriedTransaction]:
    """One record per (journey, PSP) pair with more than one attempt."""
    retried = []
    for journey in journeys:
        attempts_per_psp = Counter(attempt.psp_name for attempt in journey.attempts)
        for psp_name, attempts in attempts_per_psp.items():
            if attempts > 1:
                retried.append(
                    RetriedTransaction(
                        merchant_order_id=journey.merchant_order_id,
                        psp_name=psp_name,
                        attempts=attempts,
                        final_status="approved" if journey.is_successful else "declined",
                        country=journey.country,
                    )
                )
    return retried


def extract_cross_psp_flows(journeys: Iterable[Journey]) -> list[CrossPSPFlow]:
    """
    Successful journeys that involved at least two PSPs.

    ``approved_by`` is the PSP of the first approving attempt in sorted
    order. ``declined_by`` holds every other PSP with at least one
    non-approving attempt, in order of first appearance. Journeys where no
    other PSP failed are not flows.
    """
    flows = []
    for journey in journeys:
        if not journey.is_successful or len(journey.psps_involved) < 2:
            continue

        approving = next(attempt for attempt in journey.attempts if attempt.is_approved)
        declined_by = tuple(dict.fromkeys(
            attempt.psp_name
            for attempt in journey.attempts
            if attempt.psp_name != approving.psp_name and not attempt.is_approved
        ))
        if not declined_by:
            continue

        flows.append(
            CrossPSPFlow(
                merchant_order_id=journey.merchant_order_id,
                approved_by=approving.psp_name,
                declined_by=declined_by,
                country=journey.country,
                amount=approving.amount,
                currency=approving.currency,
            )
        )
    return flows


def tally_decline_reasons(
    journeys: Iterable[Journey],
    classifier: StatusClassifier | None = None,
) -> list[DeclineReason]:
    """
    Frequency of exact decline texts.

    Counts declined attempts and any other non-approved attempt carrying a
    decline reason. The text is the decline reason when present, else the
    raw status, compared as-is. Most frequent first, ties by text.
    """
    classifier = classifier or StatusClassifier()

    reasons: Counter[str] = Counter()
    for journey in journeys:
        for attempt in journey.attempts:
            if attempt.is_approved:
                continue
            if attempt.outcome is not AttemptOutcome.DECLINED and not attempt.decline_reason:
                continue
            reasons[attempt.decline_reason or attempt.status] += 1

    return [
        DeclineReason(reason=reason, count=count, type=classifier.decline_type(reason))
        for reason, count in sorted(reasons.items(), key=lambda item: (-item[1], item[0]))
    ]
