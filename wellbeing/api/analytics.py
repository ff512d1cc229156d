"""FastAPI survey analytics endpoints.

GET  /v1/surveys/{survey_id}/analytics  — metric snapshot (gated)
POST /v1/surveys/{survey_id}/summary    — narrative summary
GET  /v1/users/{user_id}/surveys        — survey picker options

The caller's user id arrives in the X-User-Id header. Survey endpoints answer
403 for surveys owned by another user and 404 for unknown surveys.
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from wellbeing.agents.summary import NarrativeSummaryGenerator
from wellbeing.analytics.service import AnalyticsService
from wellbeing.api.dependencies import (
    get_analytics_service,
    get_current_user_id,
    get_summary_generator,
)
from wellbeing.errors import InvalidDateRange, StorageUnavailable, SurveyAccessDenied, SurveyNotFound
from wellbeing.models.analytics import MetricSnapshot, SummaryResult
from wellbeing.models.survey import DateRange, SurveyOption

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["analytics"])


def _date_range(start: datetime | None, end: datetime | None) -> DateRange | None:
    if start is None and end is None:
        return None
    try:
        return DateRange(start=start, end=end)
    except InvalidDateRange as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


async def _authorize(service: AnalyticsService, survey_id: UUID, user_id: UUID) -> None:
    try:
        await service.authorize(survey_id, user_id)
    except SurveyNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SurveyAccessDenied as exc:
        raise HTTPException(status_code=403, detail="Cannot view another user's survey") from exc
    except (StorageUnavailable, TimeoutError) as exc:
        logger.warning("Ownership check unavailable for survey %s: %r", survey_id, exc)
        raise HTTPException(status_code=503, detail="Survey analytics are temporarily unavailable") from exc


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/surveys/{survey_id}/analytics", response_model=MetricSnapshot)
async def get_survey_analytics(
    survey_id: UUID,
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
) -> MetricSnapshot:
    """Metric snapshot for one survey, national fields per the caller's tier."""
    date_range = _date_range(start, end)
    await _authorize(service, survey_id, user_id)
    return await service.build_snapshot(survey_id, user_id=user_id, date_range=date_range)


@router.post("/surveys/{survey_id}/summary", response_model=SummaryResult)
async def create_survey_summary(
    survey_id: UUID,
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
    generator: NarrativeSummaryGenerator = Depends(get_summary_generator),
) -> SummaryResult:
    """Narrative summary of the same snapshot the analytics view shows."""
    date_range = _date_range(start, end)
    await _authorize(service, survey_id, user_id)
    snapshot = await service.build_snapshot(survey_id, user_id=user_id, date_range=date_range)
    return await generator.generate_summary(snapshot)


@router.get("/users/{user_id}/surveys", response_model=list[SurveyOption])
async def list_survey_options(
    user_id: UUID,
    caller_id: UUID = Depends(get_current_user_id),
    service: AnalyticsService = Depends(get_analytics_service),
) -> list[SurveyOption]:
    """The user's surveys with derived status, newest first."""
    if caller_id != user_id:
        raise HTTPException(status_code=403, detail="Cannot list another user's surveys")
    try:
        return await service.list_survey_options(user_id)
    except (StorageUnavailable, TimeoutError) as exc:
        logger.warning("Survey options unavailable for user %s: %r", user_id, exc)
        raise HTTPException(status_code=503, detail="Surveys are temporarily unavailable") from exc
