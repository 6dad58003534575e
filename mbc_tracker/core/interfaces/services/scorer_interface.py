"""
Scoring collaborator interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mbc_tracker.domain.entities.assessment_response import Answer
    from mbc_tracker.domain.entities.measure import Measure
    from mbc_tracker.domain.services.scoring import ScoreResult


class IScorer(ABC):
    """Turns raw answers into a total score and severity label."""

    @abstractmethod
    def get_measure(self, measure_name: str) -> Measure:
        """Return the definition for ``measure_name`` or raise ValidationFailedError."""
        pass

    @abstractmethod
    def score(self, measure_name: str, answers: Sequence[Answer]) -> ScoreResult:
        pass
