"""Metric calculators — pure functions over survey response rows.

Every function takes rows that are already date-filtered and returns the
"empty" shape for an empty input. Malformed per-row values are skipped,
never raised on.

Deterministic — no I/O, no LLM calls.
"""

import math
import re
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from wellbeing.analytics.benchmarks import WELLBEING_QUESTIONS, WellbeingQuestion
from wellbeing.models.analytics import (
    CustomQuestionResult,
    QuestionDistribution,
    TextResponse,
    TextResponses,
)
from wellbeing.models.common import LIKERT_LABELS, CustomQuestionType
from wellbeing.models.survey import CustomQuestion, SurveyResponse

RECOMMENDATION_MIN = 0
RECOMMENDATION_MAX = 10

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a spreadsheet does (2.5 -> 3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Recommendation score
# ---------------------------------------------------------------------------


def parse_recommendation_value(raw: object) -> float | None:
    """Return the numeric score, or None if the value must be excluded.

    Accepts ints, floats and numeric text. Booleans, NaN/inf, and anything
    outside [0, 10] are excluded.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(value):
        return None
    if value < RECOMMENDATION_MIN or value > RECOMMENDATION_MAX:
        return None
    return value


def mean_recommendation(raw_values: Iterable[object]) -> float | None:
    """Arithmetic mean of the valid values, or None when there are none."""
    valid = [v for v in (parse_recommendation_value(r) for r in raw_values) if v is not None]
    if not valid:
        return None
    return sum(valid) / len(valid)


def recommendation_score(responses: Sequence[SurveyResponse]) -> float:
    """Mean recommendation score rounded to one decimal; 0 with no valid values."""
    mean = mean_recommendation(r.recommendation_score for r in responses)
    if mean is None:
        return 0.0
    return round_half_up(mean, 1)


# ---------------------------------------------------------------------------
# Likert distributions
# ---------------------------------------------------------------------------


def empty_distribution() -> dict[str, int]:
    return {label: 0 for label in LIKERT_LABELS}


def tally_likert(values: Iterable[str | None]) -> dict[str, int]:
    """Count values per Likert label. Unrecognised and null values are dropped."""
    counts = empty_distribution()
    for value in values:
        if value in counts:
            counts[value] += 1
    return counts


def to_fractions(counts: dict[str, int]) -> dict[str, float]:
    """Convert a tally to fractions in [0, 1]; all zero when nothing was counted."""
    total = sum(counts.values())
    if total == 0:
        return {label: 0.0 for label in counts}
    return {label: count / total for label, count in counts.items()}


def leaving_distribution(responses: Sequence[SurveyResponse]) -> dict[str, int]:
    return tally_likert(r.leaving_contemplation for r in responses)


def question_distributions(
    responses: Sequence[SurveyResponse],
    *,
    questions: Sequence[WellbeingQuestion] = WELLBEING_QUESTIONS,
) -> list[QuestionDistribution]:
    """One four-bucket tally per tracked question.

    National figures are left empty; the access gate fills them for entitled
    callers.
    """
    results: list[QuestionDistribution] = []
    for q in questions:
        counts = tally_likert(r.answers.get(q.key) for r in responses)
        results.append(
            QuestionDistribution(
                key=q.key,
                question=q.question,
                school_responses=counts,
                total_responses=sum(counts.values()),
            )
        )
    return results


# ---------------------------------------------------------------------------
# Free text
# ---------------------------------------------------------------------------


def text_responses(responses: Sequence[SurveyResponse]) -> TextResponses:
    """Non-blank "doing well" / "could improve" answers, newest first."""
    ordered = sorted(responses, key=lambda r: r.created_at, reverse=True)
    doing_well = [
        TextResponse(response=r.doing_well, created_at=r.created_at)
        for r in ordered
        if r.doing_well and r.doing_well.strip()
    ]
    improvements = [
        TextResponse(response=r.improvements, created_at=r.created_at)
        for r in ordered
        if r.improvements and r.improvements.strip()
    ]
    return TextResponses(doing_well=doing_well, improvements=improvements)


# ---------------------------------------------------------------------------
# Custom questions
# ---------------------------------------------------------------------------


def custom_question_results(
    questions: Sequence[CustomQuestion],
    responses: Sequence[SurveyResponse],
) -> list[CustomQuestionResult]:
    """Collect answers per custom question; dropdowns also get a chart-ready tally."""
    results: list[CustomQuestionResult] = []
    for question in questions:
        qid = str(question.question_id)
        stripped = ((r.custom_answers.get(qid) or "").strip() for r in responses)
        answers = [answer for answer in stripped if answer]
        counts: dict[str, int] | None = None
        if question.type == CustomQuestionType.DROPDOWN:
            counts = {option: 0 for option in question.options}
            for answer in answers:
                counts[answer] = counts.get(answer, 0) + 1
        results.append(
            CustomQuestionResult(
                question_id=question.question_id,
                text=question.text,
                type=question.type,
                responses=answers,
                counts=counts,
            )
        )
    return results


# ---------------------------------------------------------------------------
# Helpers shared with the dashboard
# ---------------------------------------------------------------------------


def parse_recipient_emails(emails: str | None) -> list[str]:
    """Split a comma-separated recipient list, keeping valid addresses only."""
    if not emails:
        return []
    candidates = (e.strip() for e in emails.split(","))
    return [e for e in candidates if e and _EMAIL_RE.match(e)]
