"""FastAPI dashboard endpoint.

GET /v1/users/{user_id}/dashboard — headline stats across the user's surveys

A store failure never fails the request: the zero state is returned with
``available`` set to false and a message for the dashboard banner.
"""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from wellbeing.analytics.access import BenchmarkAccessGate
from wellbeing.analytics.dashboard import DashboardSummary, compute_dashboard_summary
from wellbeing.api.dependencies import get_access_gate, get_current_user_id, get_response_store
from wellbeing.config.settings import Settings, get_settings
from wellbeing.errors import StorageUnavailable
from wellbeing.repositories.base import ResponseStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/users", tags=["dashboard"])

UNAVAILABLE_MESSAGE = "Dashboard statistics are temporarily unavailable."


class DashboardResponse(BaseModel):
    total_surveys: int
    total_respondents: int
    response_rate: str
    benchmark_score: str
    national_access: bool
    national_benchmark_score: float | None = None
    available: bool = True
    message: str | None = None


@router.get("/{user_id}/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user_id: UUID,
    caller_id: UUID = Depends(get_current_user_id),
    store: ResponseStore = Depends(get_response_store),
    gate: BenchmarkAccessGate = Depends(get_access_gate),
    settings: Settings = Depends(get_settings),
) -> DashboardResponse:
    """Dashboard summary plus the national benchmark when entitled."""
    if caller_id != user_id:
        raise HTTPException(status_code=403, detail="Cannot view another user's dashboard")

    async def _summary() -> tuple[DashboardSummary, str | None]:
        try:
            summary = await asyncio.wait_for(
                compute_dashboard_summary(user_id, store),
                timeout=settings.STORE_TIMEOUT_SECONDS,
            )
        except (StorageUnavailable, TimeoutError) as exc:
            logger.warning("Dashboard degraded for user %s: %r", user_id, exc)
            return DashboardSummary.empty(), UNAVAILABLE_MESSAGE
        return summary, None

    (summary, message), granted = await asyncio.gather(
        _summary(),
        gate.has_national_access(user_id),
    )
    return DashboardResponse(
        **summary.to_dict(),
        national_access=granted,
        national_benchmark_score=gate.benchmarks.recommendation_average if granted else None,
        available=message is None,
        message=message,
    )
