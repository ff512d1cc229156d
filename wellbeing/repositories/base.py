"""Abstract store interfaces for the analytics persistence layer.

The analytics core is read-only: stores expose SELECT-equivalent operations
and never add, flush, or commit. Calculators depend on these interfaces,
never on a live database, so they stay pure and testable.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from wellbeing.errors import StorageUnavailable
from wellbeing.models.common import SubscriptionTier
from wellbeing.models.survey import CustomQuestion, DateRange, SurveyResponse, SurveyTemplate


class ResponseStore(ABC):
    """Read access to surveys, responses and custom questions."""

    @abstractmethod
    async def fetch_responses(
        self,
        survey_id: UUID,
        date_range: DateRange | None = None,
    ) -> list[SurveyResponse]:
        """Responses for exactly one survey, oldest first.

        ``date_range.start`` is inclusive; responses strictly after
        ``date_range.end`` are excluded. No match returns [].
        """
        ...

    @abstractmethod
    async def get_survey(self, survey_id: UUID) -> SurveyTemplate | None:
        """One survey by id, or None when it does not exist."""
        ...

    @abstractmethod
    async def list_surveys(self, creator_id: UUID) -> list[SurveyTemplate]:
        """All surveys owned by ``creator_id``, newest send date first."""
        ...

    @abstractmethod
    async def count_responses(self, survey_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Response count per survey id (surveys with none may be absent)."""
        ...

    @abstractmethod
    async def fetch_recommendation_values(self, survey_ids: Sequence[UUID]) -> list[object]:
        """Raw non-null recommendation values across the given surveys."""
        ...

    @abstractmethod
    async def fetch_custom_questions(self, survey_id: UUID) -> list[CustomQuestion]:
        ...


class TierSource(ABC):
    """Source of truth for a user's effective subscription tier."""

    @abstractmethod
    async def get_effective_tier(self, user_id: UUID) -> SubscriptionTier:
        ...


@asynccontextmanager
async def storage_errors(operation: str) -> AsyncIterator[None]:
    """Translate driver and connection failures into StorageUnavailable."""
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        raise StorageUnavailable(operation, str(exc)) from exc
