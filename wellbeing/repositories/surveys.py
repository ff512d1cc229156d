"""Survey and response repository — SQL implementation of ResponseStore.

Each call opens its own short-lived session from the factory, so the
analytics service can issue panel reads concurrently.
"""

import json
import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wellbeing.db.tables import (
    CustomQuestionResponseRow,
    CustomQuestionRow,
    SurveyQuestionRow,
    SurveyResponseRow,
    SurveyTemplateRow,
)
from wellbeing.models.common import CustomQuestionType, SurveyStatus
from wellbeing.models.survey import CustomQuestion, DateRange, SurveyResponse, SurveyTemplate
from wellbeing.repositories.base import ResponseStore, storage_errors

logger = logging.getLogger(__name__)


class SurveyRepository(ResponseStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_responses(
        self,
        survey_id: UUID,
        date_range: DateRange | None = None,
    ) -> list[SurveyResponse]:
        stmt = select(SurveyResponseRow).where(SurveyResponseRow.survey_id == survey_id)
        if date_range is not None and date_range.start is not None:
            stmt = stmt.where(SurveyResponseRow.created_at >= date_range.start)
        if date_range is not None and date_range.end is not None:
            stmt = stmt.where(SurveyResponseRow.created_at <= date_range.end)
        stmt = stmt.order_by(SurveyResponseRow.created_at)

        async with storage_errors("fetch_responses"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
                custom = await self._custom_answers(session, [r.response_id for r in rows])

        return [_to_response(row, custom.get(row.response_id, {})) for row in rows]

    async def get_survey(self, survey_id: UUID) -> SurveyTemplate | None:
        async with storage_errors("get_survey"):
            async with self._session_factory() as session:
                row = await session.get(SurveyTemplateRow, survey_id)
        return _to_template(row) if row is not None else None

    async def list_surveys(self, creator_id: UUID) -> list[SurveyTemplate]:
        stmt = (
            select(SurveyTemplateRow)
            .where(SurveyTemplateRow.creator_id == creator_id)
            .order_by(SurveyTemplateRow.date.desc())
        )
        async with storage_errors("list_surveys"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
        # Every owned row counts towards the dashboard, including legacy ones
        return [_to_template(row) for row in rows]

    async def count_responses(self, survey_ids: Sequence[UUID]) -> dict[UUID, int]:
        if not survey_ids:
            return {}
        stmt = (
            select(SurveyResponseRow.survey_id, func.count())
            .where(SurveyResponseRow.survey_id.in_(list(survey_ids)))
            .group_by(SurveyResponseRow.survey_id)
        )
        async with storage_errors("count_responses"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return {survey_id: count for survey_id, count in result.all()}

    async def fetch_recommendation_values(self, survey_ids: Sequence[UUID]) -> list[object]:
        if not survey_ids:
            return []
        stmt = select(SurveyResponseRow.recommendation_score).where(
            SurveyResponseRow.survey_id.in_(list(survey_ids)),
            SurveyResponseRow.recommendation_score.is_not(None),
        )
        async with storage_errors("fetch_recommendation_values"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())

    async def fetch_custom_questions(self, survey_id: UUID) -> list[CustomQuestion]:
        stmt = (
            select(CustomQuestionRow)
            .join(SurveyQuestionRow, SurveyQuestionRow.question_id == CustomQuestionRow.question_id)
            .where(SurveyQuestionRow.survey_id == survey_id)
            .order_by(CustomQuestionRow.created_at)
        )
        async with storage_errors("fetch_custom_questions"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
        return [_to_question(row) for row in rows]

    # ----- helpers -----

    async def _custom_answers(
        self,
        session: AsyncSession,
        response_ids: list[UUID],
    ) -> dict[UUID, dict[str, str]]:
        if not response_ids:
            return {}
        result = await session.execute(
            select(CustomQuestionResponseRow).where(
                CustomQuestionResponseRow.response_id.in_(response_ids)
            )
        )
        answers: dict[UUID, dict[str, str]] = {}
        for row in result.scalars().all():
            answers.setdefault(row.response_id, {})[str(row.question_id)] = row.answer
        return answers


# ---------------------------------------------------------------------------
# Row -> model conversion
# ---------------------------------------------------------------------------


def _to_response(row: SurveyResponseRow, custom_answers: dict[str, str]) -> SurveyResponse:
    answers = row.answers if isinstance(row.answers, dict) else {}
    return SurveyResponse(
        response_id=row.response_id,
        survey_id=row.survey_id,
        created_at=row.created_at,
        recommendation_score=row.recommendation_score,
        leaving_contemplation=row.leaving_contemplation,
        answers={str(k): v if isinstance(v, str) else None for k, v in answers.items()},
        doing_well=row.doing_well,
        improvements=row.improvements,
        role=row.role,
        custom_answers=custom_answers,
    )


def _to_template(row: SurveyTemplateRow) -> SurveyTemplate:
    status = None
    if row.status:
        try:
            status = SurveyStatus(row.status)
        except ValueError:
            logger.warning("Unknown status %r on survey %s", row.status, row.survey_id)
    return SurveyTemplate(
        survey_id=row.survey_id,
        creator_id=row.creator_id,
        name=row.name,
        date=row.date,
        close_date=row.close_date,
        emails=row.emails,
        status=status,
    )


def _to_question(row: CustomQuestionRow) -> CustomQuestion:
    try:
        qtype = CustomQuestionType(row.type)
    except ValueError:
        qtype = CustomQuestionType.TEXT
    return CustomQuestion(
        question_id=row.question_id,
        text=row.text,
        type=qtype,
        options=_parse_options(row.options),
    )


def _parse_options(raw: object) -> list[str]:
    """Options arrive as a JSON array or, from older rows, a JSON-encoded string."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return []
    if isinstance(raw, list):
        return [str(option) for option in raw]
    return []
