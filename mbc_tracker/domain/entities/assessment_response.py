"""
Assessment response entity.

Immutable record of a completed questionnaire. Exactly one exists per
completed instance.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True)
class Answer:
    """One answered question."""

    question_num: int
    value: int

    def to_dict(self) -> dict[str, int]:
        return {"questionNum": self.question_num, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Answer":
        question_num = data.get("question_num", data.get("questionNum"))
        return cls(question_num=int(question_num), value=int(data["value"]))


@dataclass(frozen=True)
class AssessmentResponse:
    """Raw answers plus the score computed at completion."""

    instance_id: UUID
    answers: tuple[Answer, ...]
    total_score: int
    severity_label: str
    completed_at: datetime

    id: UUID = field(default_factory=uuid4)
