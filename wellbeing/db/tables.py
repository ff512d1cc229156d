"""SQLAlchemy ORM table models for the wellbeing analytics service.

Only the fields the analytics core reads are modelled. Uses FlexJSON
(JSONB on Postgres, JSON on SQLite) for answer maps and option lists.

Categories:
- IMMUTABLE: SurveyResponse, CustomQuestionResponse (written once on submit)
- OPERATIONAL: SurveyTemplate, CustomQuestion, SurveyQuestion, Subscription
  (owned by the authoring and billing flows, read-only here)
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from wellbeing.db.session import Base

# JSONB on PostgreSQL, plain JSON on SQLite (for tests)
FlexJSON = JSONB().with_variant(JSON(), "sqlite")


# ---------------------------------------------------------------------------
# Surveys
# ---------------------------------------------------------------------------


class SurveyTemplateRow(Base):
    __tablename__ = "survey_templates"

    survey_id: Mapped[UUID] = mapped_column(primary_key=True)
    creator_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    close_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    emails: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SurveyResponseRow(Base):
    """Immutable respondent submission."""

    __tablename__ = "survey_responses"
    __table_args__ = (
        Index("ix_survey_responses_survey_created", "survey_id", "created_at"),
    )

    response_id: Mapped[UUID] = mapped_column(primary_key=True)
    survey_id: Mapped[UUID] = mapped_column(
        ForeignKey("survey_templates.survey_id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Stored as submitted text; validated by the calculators
    recommendation_score: Mapped[str | None] = mapped_column(String(20), nullable=True)
    leaving_contemplation: Mapped[str | None] = mapped_column(String(50), nullable=True)
    answers = mapped_column(FlexJSON, nullable=False, default=dict)
    doing_well: Mapped[str | None] = mapped_column(Text, nullable=True)
    improvements: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str | None] = mapped_column(String(100), nullable=True)


# ---------------------------------------------------------------------------
# Custom questions
# ---------------------------------------------------------------------------


class CustomQuestionRow(Base):
    __tablename__ = "custom_questions"

    question_id: Mapped[UUID] = mapped_column(primary_key=True)
    creator_id: Mapped[UUID] = mapped_column(nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="text")
    options = mapped_column(FlexJSON, nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SurveyQuestionRow(Base):
    """Links a custom question to a survey."""

    __tablename__ = "survey_questions"

    link_id: Mapped[UUID] = mapped_column(primary_key=True)
    survey_id: Mapped[UUID] = mapped_column(
        ForeignKey("survey_templates.survey_id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[UUID] = mapped_column(
        ForeignKey("custom_questions.question_id", ondelete="CASCADE"), nullable=False
    )


class CustomQuestionResponseRow(Base):
    """Immutable answer to a custom question, attached to one submission."""

    __tablename__ = "custom_question_responses"

    answer_id: Mapped[UUID] = mapped_column(primary_key=True)
    response_id: Mapped[UUID] = mapped_column(
        ForeignKey("survey_responses.response_id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[UUID] = mapped_column(
        ForeignKey("custom_questions.question_id", ondelete="CASCADE"), nullable=False
    )
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------


class SubscriptionRow(Base):
    __tablename__ = "subscriptions"

    subscription_id: Mapped[UUID] = mapped_column(primary_key=True)
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
