"""Tracked wellbeing questions and national reference benchmarks.

National figures are published aggregates, expressed as fractions of
respondents per Likert bucket. They are only ever shown to entitled tiers;
see ``wellbeing.analytics.access``.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WellbeingQuestion:
    key: str
    question: str


WELLBEING_QUESTIONS: tuple[WellbeingQuestion, ...] = (
    WellbeingQuestion("leadership_prioritize", "Leadership prioritise staff wellbeing in our organisation"),
    WellbeingQuestion("manageable_workload", "I have a manageable workload"),
    WellbeingQuestion("work_life_balance", "I have a good work-life balance"),
    WellbeingQuestion("health_state", "I am in good physical and mental health"),
    WellbeingQuestion("valued_member", "I feel like a valued member of the team"),
    WellbeingQuestion(
        "support_access",
        "I know where to get support when needed and feel confident to do so",
    ),
    WellbeingQuestion(
        "confidence_in_role",
        "I feel confident performing my role and am given chances to grow",
    ),
    WellbeingQuestion("org_pride", "I am proud to be part of this organisation"),
)


def _fractions(strongly_agree: int, agree: int, disagree: int, strongly_disagree: int) -> dict[str, float]:
    return {
        "Strongly Agree": strongly_agree / 100,
        "Agree": agree / 100,
        "Disagree": disagree / 100,
        "Strongly Disagree": strongly_disagree / 100,
    }


_NATIONAL_QUESTIONS: dict[str, dict[str, float]] = {
    "leadership_prioritize": _fractions(25, 40, 20, 15),
    "manageable_workload": _fractions(15, 35, 35, 15),
    "work_life_balance": _fractions(20, 30, 30, 20),
    "health_state": _fractions(20, 45, 25, 10),
    "valued_member": _fractions(30, 45, 15, 10),
    "support_access": _fractions(25, 45, 20, 10),
    "confidence_in_role": _fractions(30, 50, 15, 5),
    "org_pride": _fractions(35, 45, 15, 5),
}


@dataclass(frozen=True)
class NationalBenchmarks:
    """National comparison figures for one benchmarking period."""

    recommendation_average: float = 7.8
    leaving_contemplation: dict[str, float] = field(
        default_factory=lambda: _fractions(8, 15, 42, 35),
    )
    questions: dict[str, dict[str, float]] = field(
        default_factory=lambda: {k: dict(v) for k, v in _NATIONAL_QUESTIONS.items()},
    )

    def for_question(self, key: str) -> dict[str, float] | None:
        values = self.questions.get(key)
        return dict(values) if values is not None else None


DEFAULT_BENCHMARKS = NationalBenchmarks()
