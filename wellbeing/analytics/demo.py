"""Sample analytics shown in demo mode.

Only served when ``DEMO_MODE`` is enabled and a survey has nothing real to
show. The snapshot is flagged ``demo=True`` and still passes through the
access gate, so national figures stay tier-restricted.
"""

from datetime import datetime, timezone
from uuid import UUID

from wellbeing.analytics.benchmarks import WELLBEING_QUESTIONS
from wellbeing.models.analytics import (
    MetricSnapshot,
    QuestionDistribution,
    RecommendationScore,
    TextResponse,
    TextResponses,
)

_SAMPLE_COUNTS: dict[str, tuple[int, int, int, int]] = {
    "leadership_prioritize": (25, 35, 25, 15),
    "manageable_workload": (20, 30, 35, 15),
    "work_life_balance": (20, 30, 30, 20),
    "health_state": (25, 40, 25, 10),
    "valued_member": (35, 40, 15, 10),
    "support_access": (30, 45, 15, 10),
    "confidence_in_role": (35, 45, 15, 5),
    "org_pride": (40, 45, 10, 5),
}

_SAMPLE_DOING_WELL = (
    ("Strong sense of community and teamwork", datetime(2024, 3, 20, tzinfo=timezone.utc)),
    ("Good communication between leadership and staff", datetime(2024, 3, 17, tzinfo=timezone.utc)),
    ("Supportive environment for professional development", datetime(2024, 3, 15, tzinfo=timezone.utc)),
)

_SAMPLE_IMPROVEMENTS = (
    ("More opportunities for cross-departmental collaboration", datetime(2024, 3, 19, tzinfo=timezone.utc)),
    ("Additional planning time for new curriculum initiatives", datetime(2024, 3, 18, tzinfo=timezone.utc)),
    (
        "More consistent approach to workload management across departments",
        datetime(2024, 3, 16, tzinfo=timezone.utc),
    ),
)


def _counts(values: tuple[int, int, int, int]) -> dict[str, int]:
    sa, a, d, sd = values
    return {"Strongly Agree": sa, "Agree": a, "Disagree": d, "Strongly Disagree": sd}


def sample_snapshot(survey_id: UUID) -> MetricSnapshot:
    """Build a fresh sample snapshot (national fields unset; the gate fills them)."""
    questions = []
    for q in WELLBEING_QUESTIONS:
        counts = _counts(_SAMPLE_COUNTS[q.key])
        questions.append(
            QuestionDistribution(
                key=q.key,
                question=q.question,
                school_responses=counts,
                total_responses=sum(counts.values()),
            )
        )
    return MetricSnapshot(
        survey_id=survey_id,
        recommendation=RecommendationScore(score=7.9),
        leaving_contemplation=_counts((8, 15, 42, 35)),
        questions=questions,
        text_responses=TextResponses(
            doing_well=[TextResponse(response=r, created_at=t) for r, t in _SAMPLE_DOING_WELL],
            improvements=[TextResponse(response=r, created_at=t) for r, t in _SAMPLE_IMPROVEMENTS],
        ),
        demo=True,
    )
