"""Subscription repository — the tier source for the benchmark access gate."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wellbeing.db.tables import SubscriptionRow
from wellbeing.errors import EntitlementCheckFailed
from wellbeing.models.common import SubscriptionStatus, SubscriptionTier, as_utc, utc_now
from wellbeing.repositories.base import TierSource, storage_errors


class SubscriptionRepository(TierSource):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_effective_tier(
        self,
        user_id: UUID,
        *,
        now: datetime | None = None,
    ) -> SubscriptionTier:
        """Plan of the newest active, unexpired subscription; free otherwise.

        Raises StorageUnavailable on query failure and EntitlementCheckFailed
        when the stored plan is not a known tier.
        """
        now = as_utc(now) if now is not None else utc_now()
        stmt = (
            select(SubscriptionRow)
            .where(
                SubscriptionRow.user_id == user_id,
                SubscriptionRow.status == SubscriptionStatus.ACTIVE.value,
            )
            .order_by(SubscriptionRow.created_at.desc())
        )
        async with storage_errors("get_effective_tier"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())

        for row in rows:
            if row.end_date is not None and as_utc(row.end_date) <= now:
                continue
            try:
                return SubscriptionTier(row.plan_type)
            except ValueError as exc:
                raise EntitlementCheckFailed(
                    f"Unknown plan type {row.plan_type!r} for user {user_id}"
                ) from exc
        return SubscriptionTier.FREE
