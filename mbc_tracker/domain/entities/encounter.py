"""
Encounter entity.

A scheduled clinical appointment. Upcoming encounters drive batch
generation of assessment instances.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4


class EncounterStatus(str, Enum):
    """Lifecycle state of an encounter."""

    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class Encounter:
    patient_id: UUID
    scheduled_at: datetime
    status: EncounterStatus = EncounterStatus.SCHEDULED
    reason: str | None = None
    cancelled_at: datetime | None = None

    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not isinstance(self.status, EncounterStatus):
            self.status = EncounterStatus(self.status)

    @property
    def is_cancelled(self) -> bool:
        return self.status is EncounterStatus.CANCELLED

    def cancel(self, now: datetime) -> None:
        """Mark the encounter cancelled (idempotent)."""
        if self.is_cancelled:
            return
        self.status = EncounterStatus.CANCELLED
        self.cancelled_at = now
