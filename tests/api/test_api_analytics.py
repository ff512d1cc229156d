"""Tests for the survey analytics API endpoints.

GET  /v1/surveys/{survey_id}/analytics
POST /v1/surveys/{survey_id}/summary
GET  /v1/users/{user_id}/surveys
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from wellbeing.agents.llm_client import SummaryPayload, TextGenerationClient
from wellbeing.api.dependencies import get_text_generation_client
from wellbeing.db.tables import SubscriptionRow, SurveyResponseRow, SurveyTemplateRow

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
LABELS = ["Strongly Agree", "Agree", "Disagree", "Strongly Disagree"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _seed_survey(session: AsyncSession, user_id: UUID, n_responses: int) -> UUID:
    survey_id = uuid7()
    session.add(SurveyTemplateRow(
        survey_id=survey_id, creator_id=user_id, name="Spring Term Survey", date=T0,
        emails="a@x.com, b@x.com", created_at=T0, updated_at=T0,
    ))
    await session.commit()
    session.add_all(
        SurveyResponseRow(
            response_id=uuid7(),
            survey_id=survey_id,
            created_at=T0 + timedelta(hours=i),
            recommendation_score=str(6 + i % 4),
            leaving_contemplation=LABELS[i % 4],
            answers={"org_pride": "Agree"},
            doing_well=f"Comment {i}",
        )
        for i in range(n_responses)
    )
    await session.commit()
    return survey_id


async def _grant(session: AsyncSession, user_id: UUID, plan: str = "foundation") -> None:
    session.add(SubscriptionRow(
        subscription_id=uuid7(), user_id=user_id, plan_type=plan, status="active",
        created_at=T0, updated_at=T0,
    ))
    await session.commit()


# ===================================================================
# Analytics snapshot
# ===================================================================


class TestGetAnalytics:
    """Snapshot endpoint."""

    @pytest.mark.anyio
    async def test_free_user_gets_school_data_only(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 8)

        resp = await client.get(f"/v1/surveys/{survey_id}/analytics", headers={"X-User-Id": str(user_id)})
        assert resp.status_code == 200
        data = resp.json()
        assert data["survey_id"] == str(survey_id)
        assert sum(data["leaving_contemplation"].values()) == 8
        assert data["national_access"] is False
        assert data["recommendation"]["national_average"] is None
        assert data["national_leaving_contemplation"] is None
        assert all(q["national_responses"] is None for q in data["questions"])
        assert data["panel_errors"] == {}
        assert data["demo"] is False

    @pytest.mark.anyio
    async def test_entitled_user_gets_national_data(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 4)
        await _grant(db_session, user_id)

        resp = await client.get(f"/v1/surveys/{survey_id}/analytics", headers={"X-User-Id": str(user_id)})
        data = resp.json()
        assert data["national_access"] is True
        assert data["recommendation"]["national_average"] == 7.8
        assert data["national_leaving_contemplation"]["Disagree"] == pytest.approx(0.42)

    @pytest.mark.anyio
    async def test_date_range(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 6)
        params = {
            "start": (T0 + timedelta(hours=1)).isoformat(),
            "end": (T0 + timedelta(hours=3)).isoformat(),
        }
        resp = await client.get(
            f"/v1/surveys/{survey_id}/analytics", params=params, headers={"X-User-Id": str(user_id)}
        )
        assert resp.status_code == 200
        assert sum(resp.json()["leaving_contemplation"].values()) == 3

    @pytest.mark.anyio
    async def test_inverted_range_is_422(self, client: AsyncClient) -> None:
        params = {"start": T0.isoformat(), "end": (T0 - timedelta(days=1)).isoformat()}
        resp = await client.get(
            f"/v1/surveys/{uuid7()}/analytics", params=params, headers={"X-User-Id": str(uuid7())}
        )
        assert resp.status_code == 422

    @pytest.mark.anyio
    async def test_missing_user_header_is_422(self, client: AsyncClient) -> None:
        resp = await client.get(f"/v1/surveys/{uuid7()}/analytics")
        assert resp.status_code == 422

    @pytest.mark.anyio
    async def test_unknown_survey_is_404(self, client: AsyncClient) -> None:
        resp = await client.get(f"/v1/surveys/{uuid7()}/analytics", headers={"X-User-Id": str(uuid7())})
        assert resp.status_code == 404

    @pytest.mark.anyio
    async def test_survey_without_responses_is_empty(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 0)
        resp = await client.get(f"/v1/surveys/{survey_id}/analytics", headers={"X-User-Id": str(user_id)})
        assert resp.status_code == 200
        data = resp.json()
        assert data["recommendation"]["score"] == 0.0
        assert len(data["questions"]) == 8

    @pytest.mark.anyio
    async def test_other_users_survey_forbidden(self, client: AsyncClient, db_session: AsyncSession) -> None:
        owner_id = uuid7()
        survey_id = await _seed_survey(db_session, owner_id, 3)
        resp = await client.get(f"/v1/surveys/{survey_id}/analytics", headers={"X-User-Id": str(uuid7())})
        assert resp.status_code == 403
        assert "Comment" not in resp.text


# ===================================================================
# Summary
# ===================================================================


class TestCreateSummary:
    """Summary endpoint."""

    @pytest.mark.anyio
    async def test_small_sample_insufficient(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 5)
        resp = await client.post(f"/v1/surveys/{survey_id}/summary", headers={"X-User-Id": str(user_id)})
        assert resp.status_code == 200
        assert resp.json()["insufficient_data"] is True

    @pytest.mark.anyio
    async def test_unconfigured_service_placeholder(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 24)
        resp = await client.post(f"/v1/surveys/{survey_id}/summary", headers={"X-User-Id": str(user_id)})
        data = resp.json()
        assert data["placeholder"] is True
        assert data["insufficient_data"] is False

    @pytest.mark.anyio
    async def test_generated_summary(self, client: AsyncClient, db_session: AsyncSession) -> None:
        from wellbeing.api.main import app

        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 24)
        fake = AsyncMock(spec=TextGenerationClient)
        fake.generate.return_value = SummaryPayload(strengths=["Pride", "Team", "Support", "Extra"])
        app.dependency_overrides[get_text_generation_client] = lambda: fake

        resp = await client.post(f"/v1/surveys/{survey_id}/summary", headers={"X-User-Id": str(user_id)})
        data = resp.json()
        assert data["strengths"] == ["Pride", "Team", "Support"]
        assert data["placeholder"] is False
        payload = fake.generate.call_args.args[0]
        assert sum(payload["leavingContemplation"].values()) == 24

    @pytest.mark.anyio
    async def test_other_users_survey_not_summarised(self, client: AsyncClient, db_session: AsyncSession) -> None:
        from wellbeing.api.main import app

        survey_id = await _seed_survey(db_session, uuid7(), 24)
        fake = AsyncMock(spec=TextGenerationClient)
        app.dependency_overrides[get_text_generation_client] = lambda: fake

        resp = await client.post(f"/v1/surveys/{survey_id}/summary", headers={"X-User-Id": str(uuid7())})
        assert resp.status_code == 403
        fake.generate.assert_not_called()


# ===================================================================
# Survey options
# ===================================================================


class TestListSurveyOptions:
    """Survey picker endpoint."""

    @pytest.mark.anyio
    async def test_lists_own_surveys(self, client: AsyncClient, db_session: AsyncSession) -> None:
        user_id = uuid7()
        survey_id = await _seed_survey(db_session, user_id, 0)
        resp = await client.get(f"/v1/users/{user_id}/surveys", headers={"X-User-Id": str(user_id)})
        assert resp.status_code == 200
        (option,) = resp.json()
        assert option["survey_id"] == str(survey_id)
        assert option["status"] == "Sent"

    @pytest.mark.anyio
    async def test_other_users_forbidden(self, client: AsyncClient) -> None:
        resp = await client.get(f"/v1/users/{uuid7()}/surveys", headers={"X-User-Id": str(uuid7())})
        assert resp.status_code == 403
