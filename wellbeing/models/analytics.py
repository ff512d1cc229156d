"""Derived analytics models — MetricSnapshot and its panels, SummaryResult.

Nothing here is persisted. A snapshot is computed per request and never
cached across requests.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from wellbeing.models.common import CustomQuestionType, WellbeingBase


class RecommendationScore(WellbeingBase):
    """Mean recommendation score, with the national average when entitled."""

    score: float = 0.0
    national_average: float | None = None


class QuestionDistribution(WellbeingBase):
    """Four-bucket tally for one wellbeing question.

    ``school_responses`` holds raw counts; ``national_responses`` holds
    fractions in [0, 1], or None when the caller is not entitled to them.
    """

    key: str
    question: str
    school_responses: dict[str, int]
    national_responses: dict[str, float] | None = None
    total_responses: int = 0


class TextResponse(WellbeingBase):
    response: str
    created_at: datetime


class TextResponses(WellbeingBase):
    doing_well: list[TextResponse] = Field(default_factory=list)
    improvements: list[TextResponse] = Field(default_factory=list)


class CustomQuestionResult(WellbeingBase):
    """All answers to one custom question; dropdowns also get a tally."""

    question_id: UUID
    text: str
    type: CustomQuestionType
    responses: list[str] = Field(default_factory=list)
    counts: dict[str, int] | None = None


class MetricSnapshot(WellbeingBase):
    """Everything the analytics view renders for one survey and date range."""

    survey_id: UUID
    recommendation: RecommendationScore = Field(default_factory=RecommendationScore)
    leaving_contemplation: dict[str, int] = Field(default_factory=dict)
    national_leaving_contemplation: dict[str, float] | None = None
    questions: list[QuestionDistribution] = Field(default_factory=list)
    text_responses: TextResponses = Field(default_factory=TextResponses)
    custom_questions: list[CustomQuestionResult] = Field(default_factory=list)
    national_access: bool = False
    panel_errors: dict[str, str] = Field(
        default_factory=dict,
        description="Panel name -> user-facing message for panels that degraded.",
    )
    demo: bool = False

    @property
    def total_responses(self) -> int:
        """Responses with a recognised leaving-contemplation answer."""
        return sum(self.leaving_contemplation.values())


class SummaryResult(WellbeingBase):
    """Narrative summary, or a marker that the sample was too small."""

    insufficient_data: bool = False
    introduction: str = ""
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    placeholder: bool = False
