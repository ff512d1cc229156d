"""Analytics service — assembles a MetricSnapshot for one survey.

Each panel runs its own bounded store read; the panels and the entitlement
check fan out concurrently and are joined before the snapshot is gated. A
panel that fails or times out is replaced by its empty shape and reported
in ``panel_errors``; the other panels are unaffected.
"""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime
from typing import Any
from uuid import UUID

from wellbeing.analytics import calculators
from wellbeing.analytics.access import BenchmarkAccessGate
from wellbeing.analytics.demo import sample_snapshot
from wellbeing.analytics.status import survey_status
from wellbeing.errors import StorageUnavailable, SurveyAccessDenied, SurveyNotFound
from wellbeing.models.analytics import (
    CustomQuestionResult,
    MetricSnapshot,
    QuestionDistribution,
    RecommendationScore,
    TextResponses,
)
from wellbeing.models.survey import DateRange, SurveyOption, SurveyTemplate
from wellbeing.repositories.base import ResponseStore

logger = logging.getLogger(__name__)

PANEL_MESSAGES: dict[str, str] = {
    "recommendation": "Recommendation score is temporarily unavailable.",
    "leaving_contemplation": "Leaving contemplation data is temporarily unavailable.",
    "questions": "Wellbeing question results are temporarily unavailable.",
    "text_responses": "Written responses are temporarily unavailable.",
    "custom_questions": "Custom question results are temporarily unavailable.",
}


class AnalyticsService:
    def __init__(
        self,
        store: ResponseStore,
        gate: BenchmarkAccessGate,
        *,
        store_timeout_seconds: float = 10.0,
        demo_mode: bool = False,
    ) -> None:
        self._store = store
        self._gate = gate
        self._store_timeout = store_timeout_seconds
        self._demo_mode = demo_mode

    async def build_snapshot(
        self,
        survey_id: UUID,
        *,
        user_id: UUID,
        date_range: DateRange | None = None,
    ) -> MetricSnapshot:
        panels: dict[str, Awaitable[Any]] = {
            "recommendation": self._recommendation(survey_id, date_range),
            "leaving_contemplation": self._leaving(survey_id, date_range),
            "questions": self._questions(survey_id, date_range),
            "text_responses": self._text(survey_id, date_range),
            "custom_questions": self._custom(survey_id, date_range),
        }
        granted, *outcomes = await asyncio.gather(
            self._gate.has_national_access(user_id),
            *(self._run_panel(survey_id, name, panel) for name, panel in panels.items()),
        )
        results = dict(zip(panels, outcomes))
        panel_errors = {name: err for name, (_, err) in results.items() if err is not None}

        def value(name: str, empty: Any) -> Any:
            result, _ = results[name]
            return empty if result is None else result

        snapshot = MetricSnapshot(
            survey_id=survey_id,
            recommendation=value("recommendation", RecommendationScore()),
            leaving_contemplation=value("leaving_contemplation", calculators.empty_distribution()),
            questions=value("questions", calculators.question_distributions([])),
            text_responses=value("text_responses", TextResponses()),
            custom_questions=value("custom_questions", []),
            panel_errors=panel_errors,
        )

        if self._demo_mode and _has_no_data(snapshot):
            logger.info("No analytics data for survey %s, serving demo snapshot", survey_id)
            snapshot = sample_snapshot(survey_id)

        return self._gate.apply(snapshot, granted)

    async def authorize(self, survey_id: UUID, user_id: UUID) -> SurveyTemplate:
        """Return the survey if ``user_id`` owns it.

        Raises SurveyNotFound or SurveyAccessDenied. Store failures propagate.
        """
        survey = await asyncio.wait_for(
            self._store.get_survey(survey_id), timeout=self._store_timeout
        )
        if survey is None:
            raise SurveyNotFound(f"Survey {survey_id} not found")
        if survey.creator_id != user_id:
            logger.warning("User %s denied access to survey %s", user_id, survey_id)
            raise SurveyAccessDenied(f"Survey {survey_id} belongs to another user")
        return survey

    async def list_survey_options(
        self,
        user_id: UUID,
        *,
        now: datetime | None = None,
    ) -> list[SurveyOption]:
        """The user's surveys with their derived status, newest first."""
        surveys = await asyncio.wait_for(
            self._store.list_surveys(user_id), timeout=self._store_timeout
        )
        return [
            SurveyOption(
                survey_id=s.survey_id,
                name=s.name,
                date=s.date,
                status=survey_status(s.date, s.close_date, s.status, now=now),
            )
            for s in sorted(surveys, key=lambda s: s.date, reverse=True)
        ]

    # ----- panels -----

    async def _run_panel(
        self,
        survey_id: UUID,
        name: str,
        panel: Awaitable[Any],
    ) -> tuple[Any, str | None]:
        try:
            return await asyncio.wait_for(panel, timeout=self._store_timeout), None
        except (StorageUnavailable, TimeoutError) as exc:
            logger.warning("Panel %s degraded for survey %s: %r", name, survey_id, exc)
            return None, PANEL_MESSAGES[name]

    async def _recommendation(self, survey_id: UUID, date_range: DateRange | None) -> RecommendationScore:
        responses = await self._store.fetch_responses(survey_id, date_range)
        return RecommendationScore(score=calculators.recommendation_score(responses))

    async def _leaving(self, survey_id: UUID, date_range: DateRange | None) -> dict[str, int]:
        responses = await self._store.fetch_responses(survey_id, date_range)
        return calculators.leaving_distribution(responses)

    async def _questions(
        self, survey_id: UUID, date_range: DateRange | None
    ) -> list[QuestionDistribution]:
        responses = await self._store.fetch_responses(survey_id, date_range)
        return calculators.question_distributions(responses)

    async def _text(self, survey_id: UUID, date_range: DateRange | None) -> TextResponses:
        responses = await self._store.fetch_responses(survey_id, date_range)
        return calculators.text_responses(responses)

    async def _custom(
        self, survey_id: UUID, date_range: DateRange | None
    ) -> list[CustomQuestionResult]:
        questions = await self._store.fetch_custom_questions(survey_id)
        if not questions:
            return []
        responses = await self._store.fetch_responses(survey_id, date_range)
        return calculators.custom_question_results(questions, responses)


def _has_no_data(snapshot: MetricSnapshot) -> bool:
    """True when none of the core panels carries a tallied answer or comment."""
    return (
        snapshot.total_responses == 0
        and all(q.total_responses == 0 for q in snapshot.questions)
        and not snapshot.text_responses.doing_well
        and not snapshot.text_responses.improvements
    )
