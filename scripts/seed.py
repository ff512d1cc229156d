"""Seed script — load a demo school into the wellbeing database.

Creates:
1. A foundation-tier subscription for the demo school user
2. Two surveys (last term, closed; this term, still open) with recipient lists
3. Responses for both surveys, including free-text comments
4. A dropdown custom question attached to this term's survey, with answers

Idempotent: safe to run multiple times — skips if the demo user already
owns surveys.

Usage:
    python -m scripts.seed          # against DATABASE_URL from .env
    pytest tests/scripts/test_seed.py  # against aiosqlite
"""

import asyncio
import random
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wellbeing.analytics.benchmarks import WELLBEING_QUESTIONS
from wellbeing.db.tables import (
    CustomQuestionResponseRow,
    CustomQuestionRow,
    SubscriptionRow,
    SurveyQuestionRow,
    SurveyResponseRow,
    SurveyTemplateRow,
)
from wellbeing.models.common import (
    LIKERT_LABELS,
    CustomQuestionType,
    SubscriptionStatus,
    SubscriptionTier,
    new_uuid7,
    utc_now,
)

DEMO_USER_ID = UUID("0192f0c1-6d2e-7a3b-8c4d-5e6f7a8b9c0d")
DEMO_SCHOOL_DOMAIN = "demo-school.example"

DEMO_RECIPIENT_COUNT = 30
DEMO_RESPONSES_PER_SURVEY = {"Autumn Term Survey": 22, "Spring Term Survey": 24}

DEMO_DEPARTMENT_OPTIONS = ["Teaching staff", "Support staff", "Leadership team"]

# Answer weights per Likert label (Strongly Agree .. Strongly Disagree)
_LIKERT_WEIGHTS = (30, 40, 20, 10)
_LEAVING_WEIGHTS = (8, 15, 42, 35)

SAMPLE_DOING_WELL = [
    "Supportive environment for professional development",
    "Good communication between leadership and staff",
    "Strong sense of community and teamwork",
    "Better recognition of staff achievements",
]

SAMPLE_IMPROVEMENTS = [
    "More consistent approach to workload management across departments",
    "Additional planning time for new curriculum initiatives",
    "More opportunities for cross-departmental collaboration",
]


def demo_recipients(count: int = DEMO_RECIPIENT_COUNT) -> str:
    """Comma-separated recipient list, as a survey author would paste it."""
    return ", ".join(f"staff{i:02d}@{DEMO_SCHOOL_DOMAIN}" for i in range(1, count + 1))


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


async def seed_subscription(
    session: AsyncSession,
    user_id: UUID = DEMO_USER_ID,
    plan: SubscriptionTier = SubscriptionTier.FOUNDATION,
) -> SubscriptionRow:
    now = utc_now()
    row = SubscriptionRow(
        subscription_id=new_uuid7(),
        user_id=user_id,
        plan_type=plan.value,
        status=SubscriptionStatus.ACTIVE.value,
        start_date=now - timedelta(days=180),
        end_date=now + timedelta(days=185),
        created_at=now,
        updated_at=now,
    )
    session.add(row)
    await session.flush()
    return row


async def seed_survey(
    session: AsyncSession,
    *,
    name: str,
    date: datetime,
    close_date: datetime | None,
    creator_id: UUID = DEMO_USER_ID,
) -> SurveyTemplateRow:
    now = utc_now()
    row = SurveyTemplateRow(
        survey_id=new_uuid7(),
        creator_id=creator_id,
        name=name,
        date=date,
        close_date=close_date,
        emails=demo_recipients(),
        status=None,
        created_at=now,
        updated_at=now,
    )
    session.add(row)
    await session.flush()
    return row


async def seed_responses(
    session: AsyncSession,
    survey: SurveyTemplateRow,
    count: int,
    *,
    rng: random.Random,
) -> list[SurveyResponseRow]:
    """Add ``count`` plausible responses spread over the days after sending."""
    rows = []
    for i in range(count):
        answers = {
            q.key: rng.choices(LIKERT_LABELS, weights=_LIKERT_WEIGHTS)[0]
            for q in WELLBEING_QUESTIONS
        }
        rows.append(
            SurveyResponseRow(
                response_id=new_uuid7(),
                survey_id=survey.survey_id,
                created_at=survey.date + timedelta(hours=6 * (i + 1)),
                recommendation_score=str(rng.choice([5, 6, 7, 7, 8, 8, 8, 9, 9, 10])),
                leaving_contemplation=rng.choices(LIKERT_LABELS, weights=_LEAVING_WEIGHTS)[0],
                answers=answers,
                doing_well=SAMPLE_DOING_WELL[i % len(SAMPLE_DOING_WELL)] if i % 3 == 0 else None,
                improvements=SAMPLE_IMPROVEMENTS[i % len(SAMPLE_IMPROVEMENTS)] if i % 4 == 0 else None,
                role=rng.choice(DEMO_DEPARTMENT_OPTIONS),
            )
        )
    session.add_all(rows)
    await session.flush()
    return rows


async def seed_custom_question(
    session: AsyncSession,
    survey: SurveyTemplateRow,
    responses: list[SurveyResponseRow],
    *,
    rng: random.Random,
) -> CustomQuestionRow:
    """Attach a department dropdown to ``survey`` and answer it for each response."""
    now = utc_now()
    question = CustomQuestionRow(
        question_id=new_uuid7(),
        creator_id=survey.creator_id,
        text="Which part of the school do you work in?",
        type=CustomQuestionType.DROPDOWN.value,
        options=list(DEMO_DEPARTMENT_OPTIONS),
        archived=False,
        created_at=now,
    )
    session.add(question)
    await session.flush()

    session.add(
        SurveyQuestionRow(link_id=new_uuid7(), survey_id=survey.survey_id, question_id=question.question_id)
    )
    session.add_all(
        CustomQuestionResponseRow(
            answer_id=new_uuid7(),
            response_id=r.response_id,
            question_id=question.question_id,
            answer=rng.choice(DEMO_DEPARTMENT_OPTIONS),
            created_at=r.created_at,
        )
        for r in responses
    )
    await session.flush()
    return question


async def seed_demo(session: AsyncSession, *, seed: int = 2024) -> dict:
    """Idempotent demo seed: subscription + two surveys + responses.

    Returns dict with keys: created (bool), user_id, survey_ids.
    If the demo user already owns surveys, returns created=False and skips.
    """
    result = await session.execute(
        select(SurveyTemplateRow.survey_id).where(SurveyTemplateRow.creator_id == DEMO_USER_ID),
    )
    existing = list(result.scalars().all())
    if existing:
        return {"created": False, "user_id": DEMO_USER_ID, "survey_ids": existing}

    rng = random.Random(seed)
    now = utc_now()

    await seed_subscription(session)

    autumn = await seed_survey(
        session,
        name="Autumn Term Survey",
        date=now - timedelta(days=150),
        close_date=now - timedelta(days=120),
    )
    spring = await seed_survey(
        session,
        name="Spring Term Survey",
        date=now - timedelta(days=14),
        close_date=now + timedelta(days=14),
    )

    await seed_responses(session, autumn, DEMO_RESPONSES_PER_SURVEY[autumn.name], rng=rng)
    spring_responses = await seed_responses(
        session, spring, DEMO_RESPONSES_PER_SURVEY[spring.name], rng=rng
    )
    await seed_custom_question(session, spring, spring_responses, rng=rng)

    return {
        "created": True,
        "user_id": DEMO_USER_ID,
        "survey_ids": [spring.survey_id, autumn.survey_id],
        "response_count": sum(DEMO_RESPONSES_PER_SURVEY.values()),
    }


# ---------------------------------------------------------------------------
# CLI entry point: python -m scripts.seed
# ---------------------------------------------------------------------------


async def _run_seed() -> None:
    """Run the demo seed against the configured database."""
    from wellbeing.db.session import async_session_factory

    async with async_session_factory() as session:
        result = await seed_demo(session)

        if not result["created"]:
            print("Demo data already seeded. Skipping.")
            print(f"  User:      {result['user_id']}")
            return

        await session.commit()

        print("Seed complete.")
        print(f"  User:      {result['user_id']}")
        for survey_id in result["survey_ids"]:
            print(f"  Survey:    {survey_id}")
        print(f"  Responses: {result['response_count']}")


if __name__ == "__main__":
    asyncio.run(_run_seed())
