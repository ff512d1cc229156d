"""Shared types, enums, and base models used across wellbeing domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC.

    SQLite hands back naive timestamps; everything stored is UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class SubscriptionTier(StrEnum):
    """Subscription plan tiers, totally ordered free < foundation < progress < premium.

    This is the only place the ordering is defined. Compare tiers with
    ``at_least`` rather than with ``<``/``>`` (those compare the strings).
    """

    FREE = "free"
    FOUNDATION = "foundation"
    PROGRESS = "progress"
    PREMIUM = "premium"

    @property
    def rank(self) -> int:
        return _TIER_RANKS[self]

    def at_least(self, required: "SubscriptionTier") -> bool:
        """True if this tier is the same as or above ``required``."""
        return self.rank >= required.rank


_TIER_RANKS: dict[SubscriptionTier, int] = {
    SubscriptionTier.FREE: 0,
    SubscriptionTier.FOUNDATION: 1,
    SubscriptionTier.PROGRESS: 2,
    SubscriptionTier.PREMIUM: 3,
}


class SubscriptionStatus(StrEnum):
    """Lifecycle status of a subscription record."""

    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"
    PENDING = "pending"


class SurveyStatus(StrEnum):
    """Lifecycle status of a survey run."""

    SAVED = "Saved"
    SCHEDULED = "Scheduled"
    SENT = "Sent"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"


class LikertLabel(StrEnum):
    """The four fixed answer labels used by every wellbeing question."""

    STRONGLY_AGREE = "Strongly Agree"
    AGREE = "Agree"
    DISAGREE = "Disagree"
    STRONGLY_DISAGREE = "Strongly Disagree"


# Display order for distributions
LIKERT_LABELS: tuple[str, ...] = tuple(label.value for label in LikertLabel)


class CustomQuestionType(StrEnum):
    """Answer format of an organisation-defined question."""

    TEXT = "text"
    DROPDOWN = "dropdown"


# --- Base model ---


class WellbeingBase(BaseModel):
    """Base model with common configuration for all wellbeing Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }
