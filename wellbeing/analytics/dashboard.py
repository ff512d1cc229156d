"""Dashboard data service.

Roll survey metrics up across all of a user's surveys:
- Total surveys
- Total respondents across sent surveys
- Response rate against parsed recipient lists
- Benchmark (recommendation) score across every survey

Return structured data for frontend consumption.
Deterministic aggregation; the async entry point only gathers inputs.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from wellbeing.analytics.calculators import (
    mean_recommendation,
    parse_recipient_emails,
    round_half_up,
)
from wellbeing.models.common import as_utc, utc_now
from wellbeing.models.survey import SurveyTemplate
from wellbeing.repositories.base import ResponseStore

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    """Aggregated dashboard data."""

    total_surveys: int
    total_respondents: int
    response_rate: str
    benchmark_score: str
    total_recipients: int = 0

    def to_dict(self) -> dict:
        return {
            "total_surveys": self.total_surveys,
            "total_respondents": self.total_respondents,
            "response_rate": self.response_rate,
            "benchmark_score": self.benchmark_score,
        }

    @classmethod
    def empty(cls) -> "DashboardSummary":
        return cls(
            total_surveys=0,
            total_respondents=0,
            response_rate="0%",
            benchmark_score="0",
        )


def format_benchmark_score(mean: float | None) -> str:
    """One decimal place, or "0" when there is no valid score."""
    if mean is None:
        return "0"
    return f"{round_half_up(mean, 1):.1f}"


class DashboardService:
    """Compute the dashboard summary across a user's surveys."""

    def compute_summary(
        self,
        *,
        surveys: list[SurveyTemplate],
        response_counts: dict[UUID, int],
        recommendation_values: list[object],
        now: datetime,
    ) -> DashboardSummary:
        """Aggregate metrics from already-fetched survey data."""
        if not surveys:
            return DashboardSummary.empty()

        sent_ids = set(self.sent_survey_ids(surveys, now))
        sent = [s for s in surveys if s.survey_id in sent_ids]
        total_recipients = sum(len(parse_recipient_emails(s.emails)) for s in sent)
        total_respondents = sum(response_counts.get(s.survey_id, 0) for s in sent)

        if total_recipients:
            rate = int(round_half_up(total_respondents / total_recipients * 100))
        else:
            rate = 0

        return DashboardSummary(
            total_surveys=len(surveys),
            total_respondents=total_respondents,
            response_rate=f"{rate}%",
            benchmark_score=format_benchmark_score(mean_recommendation(recommendation_values)),
            total_recipients=total_recipients,
        )

    @staticmethod
    def sent_survey_ids(surveys: list[SurveyTemplate], now: datetime) -> list[UUID]:
        """Surveys already sent with a non-blank recipient list."""
        now = as_utc(now)
        return [s.survey_id for s in surveys if s.date < now and s.emails and s.emails.strip()]


async def compute_dashboard_summary(
    user_id: UUID,
    store: ResponseStore,
    *,
    now: datetime | None = None,
) -> DashboardSummary:
    """Fetch the user's survey data and aggregate it.

    Store failures propagate as StorageUnavailable; the API layer turns
    them into a zero state flagged unavailable.
    """
    now = now or utc_now()
    service = DashboardService()

    surveys = await store.list_surveys(user_id)
    if not surveys:
        return DashboardSummary.empty()

    counts = await store.count_responses(service.sent_survey_ids(surveys, now))
    values = await store.fetch_recommendation_values([s.survey_id for s in surveys])
    summary = service.compute_summary(
        surveys=surveys,
        response_counts=counts,
        recommendation_values=values,
        now=now,
    )
    logger.debug(
        "Dashboard for user %s: %d surveys, %d/%d respondents",
        user_id,
        summary.total_surveys,
        summary.total_respondents,
        summary.total_recipients,
    )
    return summary
