"""FastAPI dependency injection factories for stores and services.

Stores take the session factory via Depends(get_session_factory); services
are assembled from stores plus settings. API endpoints use these via
Depends(), and tests swap them through app.dependency_overrides.
"""

from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wellbeing.agents.llm_client import TextGenerationClient
from wellbeing.agents.summary import NarrativeSummaryGenerator
from wellbeing.analytics.access import BenchmarkAccessGate
from wellbeing.analytics.service import AnalyticsService
from wellbeing.config.settings import Settings, get_settings
from wellbeing.db.session import get_session_factory
from wellbeing.repositories.base import ResponseStore, TierSource
from wellbeing.repositories.subscriptions import SubscriptionRepository
from wellbeing.repositories.surveys import SurveyRepository

# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------


async def get_current_user_id(x_user_id: UUID = Header(...)) -> UUID:
    """Authenticated user id, injected by the upstream auth layer."""
    return x_user_id


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


async def get_response_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ResponseStore:
    return SurveyRepository(session_factory)


async def get_tier_source(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> TierSource:
    return SubscriptionRepository(session_factory)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


async def get_access_gate(
    tier_source: TierSource = Depends(get_tier_source),
    settings: Settings = Depends(get_settings),
) -> BenchmarkAccessGate:
    return BenchmarkAccessGate(
        tier_source,
        tier_override=settings.TIER_OVERRIDE,
        timeout_seconds=settings.STORE_TIMEOUT_SECONDS,
    )


async def get_analytics_service(
    store: ResponseStore = Depends(get_response_store),
    gate: BenchmarkAccessGate = Depends(get_access_gate),
    settings: Settings = Depends(get_settings),
) -> AnalyticsService:
    return AnalyticsService(
        store,
        gate,
        store_timeout_seconds=settings.STORE_TIMEOUT_SECONDS,
        demo_mode=settings.DEMO_MODE,
    )


async def get_text_generation_client(
    settings: Settings = Depends(get_settings),
) -> TextGenerationClient | None:
    if not settings.summary_configured:
        return None
    return TextGenerationClient(
        endpoint=settings.SUMMARY_SERVICE_URL,
        api_key=settings.SUMMARY_SERVICE_KEY,
        timeout=settings.SUMMARY_TIMEOUT_SECONDS,
        max_retries=settings.SUMMARY_MAX_RETRIES,
    )


async def get_summary_generator(
    client: TextGenerationClient | None = Depends(get_text_generation_client),
    settings: Settings = Depends(get_settings),
) -> NarrativeSummaryGenerator:
    return NarrativeSummaryGenerator(client, min_responses=settings.SUMMARY_MIN_RESPONSES)
