"""Narrative summary generator.

Turns a MetricSnapshot into a short list of strengths and areas to
improve, via the external text-generation service. Small samples are
never sent out, and any service failure degrades to a neutral placeholder
rather than an error.
"""

import logging
from typing import Any

from wellbeing.agents.llm_client import TextGenerationClient
from wellbeing.analytics.calculators import to_fractions
from wellbeing.errors import SummaryGenerationFailed
from wellbeing.models.analytics import MetricSnapshot, SummaryResult, TextResponse

logger = logging.getLogger(__name__)

MAX_SUMMARY_ITEMS = 3


def placeholder_summary() -> SummaryResult:
    return SummaryResult(
        introduction="An automated summary is not available for this survey right now.",
        strengths=[
            "Review the wellbeing question charts to see where staff responded most positively.",
        ],
        improvements=[
            "Read the written responses for suggestions on where to focus next.",
        ],
        placeholder=True,
    )


def _text_items(items: list[TextResponse]) -> list[dict[str, str]]:
    return [{"response": t.response, "created_at": t.created_at.isoformat()} for t in items]


def build_payload(snapshot: MetricSnapshot) -> dict[str, Any]:
    """Request body for the summary function.

    National figures are included only if the snapshot carries them, i.e.
    only after the access gate granted them.
    """
    return {
        "recommendationScore": {
            "score": snapshot.recommendation.score,
            "nationalAverage": snapshot.recommendation.national_average,
        },
        "leavingContemplation": dict(snapshot.leaving_contemplation),
        "detailedResponses": [
            {
                "question": q.question,
                "schoolResponses": to_fractions(q.school_responses),
                "nationalResponses": q.national_responses,
            }
            for q in snapshot.questions
        ],
        "textResponses": {
            "doingWell": _text_items(snapshot.text_responses.doing_well),
            "improvements": _text_items(snapshot.text_responses.improvements),
        },
    }


class NarrativeSummaryGenerator:
    """Generate a SummaryResult for a snapshot, never raising on service failure."""

    def __init__(
        self,
        client: TextGenerationClient | None,
        *,
        min_responses: int = 20,
    ) -> None:
        self._client = client
        self._min_responses = min_responses

    async def generate_summary(self, snapshot: MetricSnapshot) -> SummaryResult:
        total = snapshot.total_responses
        if total < self._min_responses:
            logger.info(
                "Survey %s has %d responses, below the %d needed for a summary",
                snapshot.survey_id,
                total,
                self._min_responses,
            )
            return SummaryResult(insufficient_data=True)

        if self._client is None:
            return placeholder_summary()

        try:
            reply = await self._client.generate(build_payload(snapshot))
        except SummaryGenerationFailed as exc:
            logger.warning("Summary generation failed for survey %s: %s", snapshot.survey_id, exc)
            return placeholder_summary()

        if reply.insufficient_data:
            return SummaryResult(insufficient_data=True)

        return SummaryResult(
            introduction=reply.introduction,
            strengths=reply.strengths[:MAX_SUMMARY_ITEMS],
            improvements=reply.improvements[:MAX_SUMMARY_ITEMS],
        )
