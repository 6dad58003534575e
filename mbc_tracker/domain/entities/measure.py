"""
Measure entity.

A measure is a standardized questionnaire definition: ordered questions,
each with a numeric answer range, and severity bands that partition the
full score range of the instrument.
"""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from mbc_tracker.domain.exceptions import ValidationFailedError


@dataclass(frozen=True)
class QuestionDefinition:
    """A single question with its allowed answer range."""

    number: int
    text: str
    min_value: int = 0
    max_value: int = 3

    def __post_init__(self) -> None:
        if self.min_value > self.max_value:
            raise ValidationFailedError(
                f"Question {self.number} has an empty answer range "
                f"[{self.min_value}, {self.max_value}]"
            )


@dataclass(frozen=True)
class SeverityBand:
    """A labeled, inclusive sub-range of total scores."""

    label: str
    min_score: int
    max_score: int

    def contains(self, score: int) -> bool:
        return self.min_score <= score <= self.max_score


@dataclass
class Measure:
    """
    Assessment definition.

    Invariants enforced on construction:
      * questions are numbered 1..n in order
      * severity bands are ordered, contiguous and exhaustive over
        ``[min_score, max_score]`` (no gaps, no overlaps)
    """

    name: str
    questions: list[QuestionDefinition]
    severity_bands: list[SeverityBand]
    full_name: str | None = None
    description: str | None = None
    instructions: str | None = None

    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationFailedError("Measure name must not be empty", field="name")
        if not self.questions:
            raise ValidationFailedError(f"{self.name} must define at least one question")

        numbers = [q.number for q in self.questions]
        if numbers != list(range(1, len(self.questions) + 1)):
            raise ValidationFailedError(
                f"{self.name} questions must be numbered 1..{len(self.questions)} in order"
            )

        self._validate_bands()

    # ------------------------------------------------------------------
    # Derived attributes
    # ------------------------------------------------------------------

    @property
    def min_score(self) -> int:
        return sum(q.min_value for q in self.questions)

    @property
    def max_score(self) -> int:
        return sum(q.max_value for q in self.questions)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def band_for(self, score: int) -> SeverityBand:
        """Return the severity band containing ``score``."""
        for band in self.severity_bands:
            if band.contains(score):
                return band
        raise ValidationFailedError(
            f"Score {score} is outside the {self.name} range [{self.min_score}, {self.max_score}]"
        )

    def _validate_bands(self) -> None:
        if not self.severity_bands:
            raise ValidationFailedError(f"{self.name} must define severity bands")

        expected_start = self.min_score
        for band in self.severity_bands:
            if band.min_score > band.max_score:
                raise ValidationFailedError(
                    f"{self.name} band '{band.label}' has min_score above max_score"
                )
            if band.min_score != expected_start:
                kind = "gap" if band.min_score > expected_start else "overlap"
                raise ValidationFailedError(
                    f"{self.name} severity bands have a {kind} at score {expected_start}"
                )
            expected_start = band.max_score + 1

        if expected_start - 1 != self.max_score:
            raise ValidationFailedError(
                f"{self.name} severity bands must end at max score {self.max_score}"
            )
