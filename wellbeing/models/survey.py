"""Survey domain models — SurveyTemplate, SurveyResponse, CustomQuestion, DateRange.

Responses are immutable once submitted. Raw answer values are kept as the
store returns them; the calculators decide what counts as valid.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from wellbeing.errors import InvalidDateRange
from wellbeing.models.common import (
    CustomQuestionType,
    SurveyStatus,
    UTCTimestamp,
    WellbeingBase,
    as_utc,
)


class SurveyTemplate(WellbeingBase, frozen=True):
    """A named survey run owned by one creator."""

    survey_id: UUID
    creator_id: UUID | None = None
    name: str
    date: UTCTimestamp
    close_date: UTCTimestamp | None = None
    emails: str | None = Field(
        default=None,
        description="Free-form comma-separated recipient list.",
    )
    status: SurveyStatus | None = None

    @field_validator("date", "close_date")
    @classmethod
    def _normalise_timestamps(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None


class SurveyResponse(WellbeingBase, frozen=True):
    """One respondent submission."""

    response_id: UUID
    survey_id: UUID
    created_at: UTCTimestamp
    recommendation_score: int | float | str | None = None
    leaving_contemplation: str | None = None
    answers: dict[str, str | None] = Field(
        default_factory=dict,
        description="Wellbeing question key -> Likert label.",
    )
    doing_well: str | None = None
    improvements: str | None = None
    role: str | None = None
    custom_answers: dict[str, str] = Field(
        default_factory=dict,
        description="Custom question id (str) -> answer text.",
    )

    @field_validator("created_at")
    @classmethod
    def _normalise_created_at(cls, value: datetime) -> datetime:
        return as_utc(value)


class CustomQuestion(WellbeingBase, frozen=True):
    """Organisation-defined question linked to a survey."""

    question_id: UUID
    text: str
    type: CustomQuestionType = CustomQuestionType.TEXT
    options: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class DateRange:
    """Inclusive submission-time window. Either bound may be open.

    Naive datetimes are taken as UTC. ``end`` before ``start`` is rejected
    here so it never reaches the calculators.
    """

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start is not None:
            object.__setattr__(self, "start", as_utc(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", as_utc(self.end))
        if self.start is not None and self.end is not None and self.end < self.start:
            raise InvalidDateRange(
                f"Date range end {self.end.isoformat()} is before start {self.start.isoformat()}"
            )

    def contains(self, moment: datetime) -> bool:
        moment = as_utc(moment)
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


class SurveyOption(WellbeingBase):
    """A survey as listed in the analytics survey picker."""

    survey_id: UUID
    name: str
    date: UTCTimestamp
    status: SurveyStatus
