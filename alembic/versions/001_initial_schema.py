"""Initial schema — surveys, responses, custom questions, subscriptions.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -- Surveys --
    op.create_table(
        "survey_templates",
        sa.Column("survey_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("creator_id", UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("close_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("emails", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "close_date IS NULL OR close_date >= date",
            name="ck_survey_templates_close_after_send",
        ),
    )
    op.create_index("ix_survey_templates_creator_id", "survey_templates", ["creator_id"])

    # -- Responses (IMMUTABLE) --
    op.create_table(
        "survey_responses",
        sa.Column("response_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("survey_id", UUID(as_uuid=True),
                  sa.ForeignKey("survey_templates.survey_id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("recommendation_score", sa.String(20), nullable=True),
        sa.Column("leaving_contemplation", sa.String(50), nullable=True),
        sa.Column("answers", JSONB, nullable=False, server_default="{}"),
        sa.Column("doing_well", sa.Text, nullable=True),
        sa.Column("improvements", sa.Text, nullable=True),
        sa.Column("role", sa.String(100), nullable=True),
    )
    op.create_index(
        "ix_survey_responses_survey_created", "survey_responses", ["survey_id", "created_at"]
    )

    # -- Custom questions --
    op.create_table(
        "custom_questions",
        sa.Column("question_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("creator_id", UUID(as_uuid=True), nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="text"),
        sa.Column("options", JSONB, nullable=True),
        sa.Column("archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "survey_questions",
        sa.Column("link_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("survey_id", UUID(as_uuid=True),
                  sa.ForeignKey("survey_templates.survey_id", ondelete="CASCADE"), nullable=False),
        sa.Column("question_id", UUID(as_uuid=True),
                  sa.ForeignKey("custom_questions.question_id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_survey_questions_survey_id", "survey_questions", ["survey_id"])

    op.create_table(
        "custom_question_responses",
        sa.Column("answer_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("response_id", UUID(as_uuid=True),
                  sa.ForeignKey("survey_responses.response_id", ondelete="CASCADE"), nullable=False),
        sa.Column("question_id", UUID(as_uuid=True),
                  sa.ForeignKey("custom_questions.question_id", ondelete="CASCADE"), nullable=False),
        sa.Column("answer", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_custom_question_responses_response_id", "custom_question_responses", ["response_id"]
    )

    # -- Billing --
    op.create_table(
        "subscriptions",
        sa.Column("subscription_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("plan_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"])


def downgrade() -> None:
    op.drop_table("subscriptions")
    op.drop_table("custom_question_responses")
    op.drop_table("survey_questions")
    op.drop_table("custom_questions")
    op.drop_table("survey_responses")
    op.drop_table("survey_templates")
