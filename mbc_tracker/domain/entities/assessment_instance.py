"""
Assessment instance entity.

One scheduled occurrence of a measure for one patient, with its own access
token, deadlines and lifecycle. The stored ``status`` can lag behind the
wall clock (the expiration sweep runs periodically), so every check here
takes ``now`` and re-derives expiry from ``expires_at``.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from mbc_tracker.domain.exceptions import (
    InstanceAlreadyCompletedError,
    InstanceCancelledError,
    InstanceExpiredError,
)

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class InstanceStatus(str, Enum):
    """Lifecycle state of an assessment instance."""

    PENDING = "PENDING"
    SENT = "SENT"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[InstanceStatus] = frozenset(
    {InstanceStatus.COMPLETED, InstanceStatus.EXPIRED, InstanceStatus.CANCELLED}
)
NON_TERMINAL_STATUSES: frozenset[InstanceStatus] = frozenset(
    {InstanceStatus.PENDING, InstanceStatus.SENT, InstanceStatus.STARTED}
)

# Source states from which each event may fire
STARTABLE_STATUSES: frozenset[InstanceStatus] = frozenset(
    {InstanceStatus.PENDING, InstanceStatus.SENT}
)
SENDABLE_STATUSES: frozenset[InstanceStatus] = frozenset({InstanceStatus.PENDING})


# ---------------------------------------------------------------------------
# Domain entity
# ---------------------------------------------------------------------------


@dataclass
class AssessmentInstance:
    """Scheduled assessment for a patient."""

    patient_id: UUID
    measure_id: UUID
    token: str
    due_date: datetime
    expires_at: datetime

    encounter_id: UUID | None = None
    status: InstanceStatus = InstanceStatus.PENDING
    sent_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    # Populated by repositories that join the measure; never persisted here
    measure_name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.status, InstanceStatus):
            self.status = InstanceStatus(self.status)

    # ------------------------------------------------------------------
    # Live state derivation
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def is_expired(self, now: datetime) -> bool:
        """True when the link is dead, whether or not the sweep has recorded it."""
        if self.status is InstanceStatus.EXPIRED:
            return True
        return not self.is_terminal and now >= self.expires_at

    # ------------------------------------------------------------------
    # Transition guards
    # ------------------------------------------------------------------

    def ensure_actionable(self, now: datetime, attempted: str) -> None:
        """
        Raise the specific state error if the instance cannot be acted on.

        Completion and cancellation are reported ahead of expiry so a patient
        who already finished sees "already completed" rather than "expired".
        """
        if self.status is InstanceStatus.COMPLETED:
            raise InstanceAlreadyCompletedError(instance_id=str(self.id), attempted=attempted)
        if self.status is InstanceStatus.CANCELLED:
            raise InstanceCancelledError(instance_id=str(self.id), attempted=attempted)
        if self.is_expired(now):
            raise InstanceExpiredError(instance_id=str(self.id), attempted=attempted)
