"""
Compliance policy entity.

A policy is a named, singleton configuration governing how assessment
instances are generated: how often rounds recur, how long a due instance
stays "in grace" and how long its access link remains valid.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from mbc_tracker.domain.exceptions import ValidationFailedError


@dataclass
class Policy:
    """Measurement-based care policy."""

    name: str
    cadence_days: int
    grace_window_days: int
    expiration_days: int
    measures_required: list[str]
    require_at_intake: bool = True

    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationFailedError("Policy name must not be empty", field="name")

        for attr in ("cadence_days", "grace_window_days", "expiration_days"):
            value = getattr(self, attr)
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationFailedError(
                    f"{attr} must be a non-negative integer, got {value!r}", field=attr
                )

        # Ordered set: keep first occurrence of each measure
        seen: set[str] = set()
        ordered: list[str] = []
        for measure in self.measures_required:
            if measure and measure not in seen:
                seen.add(measure)
                ordered.append(measure)
        if not ordered:
            raise ValidationFailedError(
                "measures_required must name at least one measure", field="measures_required"
            )
        self.measures_required = ordered
