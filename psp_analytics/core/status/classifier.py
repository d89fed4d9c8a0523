"""
Status classification by case-insensitive substring match.

Statuses arrive as free text from several upstream systems
("credit_card_approved", "APM_DECLINED", "Success"...), so outcomes are
decided by which configured substrings a status contains rather than by a
fixed enum. New vocabularies are added through configuration.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from psp_analytics.core.models import AttemptOutcome

DEFAULT_APPROVED = ("approved", "success")
DEFAULT_DECLINED = ("declined", "fail", "error")
DEFAULT_FILTERED = ("filtered",)


def _normalize(terms) -> tuple[str, ...]:
    return tuple(
        str(term).strip().lower()
        for term in terms
        if term is not None and str(term).strip()
    )


class StatusVocabulary(BaseModel):
    """
    Substrings that place a status in each outcome category.

    Categories are checked in order approved, declined, filtered; a status
    matching none of them is OTHER. ``hard_decline`` and ``soft_decline``
    only label decline reasons and never change an outcome.
    """

    approved: tuple[str, ...] = Field(
        default=DEFAULT_APPROVED, description="Terms marking an approved attempt"
    )
    declined: tuple[str, ...] = Field(
        default=DEFAULT_DECLINED, description="Terms marking a declined attempt"
    )
    filtered: tuple[str, ...] = Field(
        default=DEFAULT_FILTERED, description="Terms marking a filtered attempt"
    )
    hard_decline: tuple[str, ...] = Field(
        default=(), description="Decline reason terms labelled hard"
    )
    soft_decline: tuple[str, ...] = Field(
        default=(), description="Decline reason terms labelled soft"
    )

    @field_validator('approved', 'declined', 'filtered', 'hard_decline', 'soft_decline', mode='before')
    @classmethod
    def normalize_terms(cls, v):
        """Lower-case and strip terms, dropping blanks"""
        return _normalize(v)

    @field_validator('approved')
    @classmethod
    def check_approved_present(cls, v):
        """Ensure at least one approved term survives normalisation"""
        if not v:
            raise ValueError("Status vocabulary needs at least one 'approved' term")
        return v

    class Config:
        frozen = True


class StatusClassifier:
    """
    Maps raw status text onto an AttemptOutcome.

    Args:
        vocabulary: Substring vocabulary; defaults to approved/success,
            declined/fail/error and filtered
    """

    def __init__(self, vocabulary: StatusVocabulary | None = None):
        self.vocabulary = vocabulary or StatusVocabulary()

    def categorize(self, status: str | None) -> AttemptOutcome:
        text = (status or "").lower()
        if self._matches(text, self.vocabulary.approved):
            return AttemptOutcome.APPROVED
        if self._matches(text, self.vocabulary.declined):
            return AttemptOutcome.DECLINED
        if self._matches(text, self.vocabulary.filtered):
            return AttemptOutcome.FILTERED
        return AttemptOutcome.OTHER

    def is_approved(self, status: str | None) -> bool:
        return self.categorize(status) is AttemptOutcome.APPROVED

    def is_declined(self, status: str | None) -> bool:
        return self.categorize(status) is AttemptOutcome.DECLINED

    def decline_type(self, reason: str | None) -> Literal["hard", "soft"] | None:
        """Label a decline reason as hard or soft; None when no term matches."""
        text = (reason or "").lower()
        if self._matches(text, self.vocabulary.hard_decline):
            return "hard"
        if self._matches(text, self.vocabulary.soft_decline):
            return "soft"
        return None

    @staticmethod
    def _matches(text: str, terms: tuple[str, ...]) -> bool:
        return any(term in text for term in terms)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(vocabulary={self.vocabulary})"
