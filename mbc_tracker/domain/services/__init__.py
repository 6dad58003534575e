"""Pure domain services."""

from mbc_tracker.domain.services.scoring import (
    MeasureScorer,
    ScoreResult,
    is_elevated,
    needs_follow_up,
    severity_description,
)
from mbc_tracker.domain.services.trends import Trend, calculate_trend

__all__ = [
    "MeasureScorer",
    "ScoreResult",
    "Trend",
    "calculate_trend",
    "is_elevated",
    "needs_follow_up",
    "severity_description",
]
