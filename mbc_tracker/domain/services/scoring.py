"""
Measure scoring service.

Pure scoring of raw questionnaire answers into a total score and severity
label. Dispatch is a lookup table keyed by upper-cased measure name.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from mbc_tracker.core.interfaces.services.scorer_interface import IScorer
from mbc_tracker.domain.entities.assessment_response import Answer
from mbc_tracker.domain.entities.measure import Measure
from mbc_tracker.domain.exceptions import ValidationFailedError
from mbc_tracker.domain.services.measure_catalog import default_catalog

SEVERITY_DESCRIPTIONS: dict[str, str] = {
    "minimal": "Minimal or no symptoms",
    "mild": "Mild symptoms",
    "moderate": "Moderate symptoms",
    "moderately_severe": "Moderately severe symptoms",
    "severe": "Severe symptoms",
}

# Scores at or above these thresholds suggest treatment / clinical follow-up
ELEVATED_THRESHOLD = 10
FOLLOW_UP_THRESHOLDS: dict[str, int] = {"PHQ-9": 15, "GAD-7": 15}


@dataclass(frozen=True)
class ScoreResult:
    total_score: int
    severity_label: str
    max_possible_score: int
    answered_questions: int


class MeasureScorer(IScorer):
    """Scores answers against a catalog of measure definitions."""

    def __init__(self, catalog: Mapping[str, Measure] | None = None) -> None:
        source = catalog if catalog is not None else default_catalog()
        self._catalog = {name.upper(): measure for name, measure in source.items()}

    def get_measure(self, measure_name: str) -> Measure:
        try:
            return self._catalog[measure_name.upper()]
        except KeyError:
            raise ValidationFailedError(
                f"Unknown measure: {measure_name}", field="measure"
            ) from None

    def known_measures(self) -> list[str]:
        return [measure.name for measure in self._catalog.values()]

    def score(self, measure_name: str, answers: Sequence[Answer]) -> ScoreResult:
        """
        Score a complete set of answers.

        Raises:
            ValidationFailedError: unknown measure, wrong answer count,
                duplicate or out-of-order question numbers, value out of range
        """
        measure = self.get_measure(measure_name)
        validate_answers(measure, answers)

        total = sum(answer.value for answer in answers)
        band = measure.band_for(total)
        return ScoreResult(
            total_score=total,
            severity_label=band.label,
            max_possible_score=measure.max_score,
            answered_questions=len(answers),
        )


def validate_answers(measure: Measure, answers: Sequence[Answer]) -> None:
    if not answers:
        raise ValidationFailedError("No answers provided", field="answers")
    if len(answers) != measure.question_count:
        raise ValidationFailedError(
            f"{measure.name} expects {measure.question_count} answers, got {len(answers)}",
            field="answers",
        )

    by_number = {question.number: question for question in measure.questions}
    seen: set[int] = set()
    for answer in answers:
        question = by_number.get(answer.question_num)
        if question is None or answer.question_num in seen:
            raise ValidationFailedError(
                f"Invalid or duplicate question number: {answer.question_num}",
                field="answers",
            )
        seen.add(answer.question_num)
        if not question.min_value <= answer.value <= question.max_value:
            raise ValidationFailedError(
                f"Invalid answer value: {answer.value}. "
                f"Must be {question.min_value}-{question.max_value}.",
                field="answers",
            )


def severity_description(label: str) -> str:
    return SEVERITY_DESCRIPTIONS.get(label, "Unknown severity")


def is_elevated(score: int) -> bool:
    return score >= ELEVATED_THRESHOLD


def needs_follow_up(measure_name: str, score: int) -> bool:
    threshold = FOLLOW_UP_THRESHOLDS.get(measure_name.upper())
    return threshold is not None and score >= threshold
