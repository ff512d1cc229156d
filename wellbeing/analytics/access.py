"""Benchmark access gate — decides who may see national comparisons.

National averages are a paid feature: they are visible to tiers at or
above ``foundation``. The gate fails closed. Any failure to establish the
tier is logged and treated as "no access".
"""

import asyncio
import logging
from uuid import UUID

from wellbeing.analytics.benchmarks import DEFAULT_BENCHMARKS, NationalBenchmarks
from wellbeing.errors import EntitlementCheckFailed, StorageUnavailable
from wellbeing.models.analytics import MetricSnapshot, RecommendationScore
from wellbeing.models.common import SubscriptionTier
from wellbeing.repositories.base import TierSource

logger = logging.getLogger(__name__)


class BenchmarkAccessGate:
    """Tier check plus the projection that withholds or fills national fields."""

    def __init__(
        self,
        tier_source: TierSource,
        *,
        required_tier: SubscriptionTier = SubscriptionTier.FOUNDATION,
        tier_override: SubscriptionTier | None = None,
        benchmarks: NationalBenchmarks = DEFAULT_BENCHMARKS,
        timeout_seconds: float | None = None,
    ) -> None:
        self._tier_source = tier_source
        self._required_tier = required_tier
        self._tier_override = tier_override
        self._benchmarks = benchmarks
        self._timeout_seconds = timeout_seconds

    @property
    def benchmarks(self) -> NationalBenchmarks:
        return self._benchmarks

    async def effective_tier(self, user_id: UUID) -> SubscriptionTier:
        """Configured override if set, else whatever the tier source says."""
        if self._tier_override is not None:
            return self._tier_override
        lookup = self._tier_source.get_effective_tier(user_id)
        if self._timeout_seconds is None:
            return await lookup
        return await asyncio.wait_for(lookup, timeout=self._timeout_seconds)

    async def has_national_access(self, user_id: UUID) -> bool:
        try:
            tier = await self.effective_tier(user_id)
        except (StorageUnavailable, EntitlementCheckFailed, TimeoutError) as exc:
            logger.warning(
                "Entitlement check failed for user %s, withholding national data: %s",
                user_id,
                exc,
            )
            return False
        return tier.at_least(self._required_tier)

    def apply(self, snapshot: MetricSnapshot, granted: bool) -> MetricSnapshot:
        """Return a copy of ``snapshot`` with national fields filled or set to None."""
        bench = self._benchmarks if granted else None
        questions = [
            q.model_copy(
                update={"national_responses": bench.for_question(q.key) if bench else None}
            )
            for q in snapshot.questions
        ]
        return snapshot.model_copy(
            update={
                "recommendation": RecommendationScore(
                    score=snapshot.recommendation.score,
                    national_average=bench.recommendation_average if bench else None,
                ),
                "national_leaving_contemplation": (
                    dict(bench.leaving_contemplation) if bench else None
                ),
                "questions": questions,
                "national_access": granted,
            }
        )
