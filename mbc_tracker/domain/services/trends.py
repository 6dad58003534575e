"""Score trend classification for patient progress."""

from collections.abc import Sequence
from enum import Enum

RECENT_WINDOW = 3
STABLE_THRESHOLD = 2.0


class Trend(str, Enum):
    INSUFFICIENT = "insufficient"
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


def calculate_trend(scores: Sequence[int]) -> Trend:
    """
    Classify a chronological series of scores.

    The mean of the last three scores is compared with the mean of the
    earlier ones (or with the first recent score when there are no earlier
    ones). Lower scores are better, so a drop means improvement.
    """
    if len(scores) < 2:
        return Trend.INSUFFICIENT

    recent = list(scores[-RECENT_WINDOW:])
    earlier = list(scores[:-RECENT_WINDOW])

    recent_avg = sum(recent) / len(recent)
    earlier_avg = sum(earlier) / len(earlier) if earlier else recent[0]

    diff = recent_avg - earlier_avg
    if abs(diff) < STABLE_THRESHOLD:
        return Trend.STABLE
    return Trend.IMPROVING if diff < 0 else Trend.WORSENING
