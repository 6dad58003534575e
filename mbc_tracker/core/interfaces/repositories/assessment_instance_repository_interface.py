"""
Interface for the Assessment Instance Repository.

This module defines the durable store of assessment instances. State changes
go exclusively through ``transition`` and ``expire_overdue``, both of which
are conditional updates so that concurrent callers cannot both win.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from mbc_tracker.domain.entities.assessment_instance import AssessmentInstance, InstanceStatus


class IAssessmentInstanceRepository(ABC):
    """Persistence contract for assessment instances."""

    @abstractmethod
    async def add(self, instance: AssessmentInstance) -> AssessmentInstance:
        """
        Persist a new instance.

        Raises:
            AlreadyScheduledError: an instance of the same measure already
                exists for the (patient, encounter) pair
        """
        pass

    @abstractmethod
    async def exists_for(
        self, patient_id: UUID, measure_id: UUID, encounter_id: UUID | None
    ) -> bool:
        """Whether the measure is already instantiated for the (patient, encounter) pair."""
        pass

    @abstractmethod
    async def get_by_id(self, instance_id: UUID) -> AssessmentInstance | None:
        pass

    @abstractmethod
    async def get_by_token(self, token: str) -> AssessmentInstance | None:
        pass

    @abstractmethod
    async def transition(
        self,
        instance_id: UUID,
        from_statuses: Iterable[InstanceStatus],
        to_status: InstanceStatus,
        now: datetime,
        require_unexpired: bool = True,
        **timestamps: Any,
    ) -> bool:
        """
        Conditionally move an instance to ``to_status``.

        The update only applies when the stored status is one of
        ``from_statuses`` and, if ``require_unexpired``, ``expires_at > now``.
        ``timestamps`` names extra columns to set (``sent_at`` etc).

        Returns:
            True when exactly this call performed the transition
        """
        pass

    @abstractmethod
    async def expire_overdue(self, now: datetime) -> list[UUID]:
        """Move every non-terminal instance with ``expires_at < now`` to EXPIRED; return their ids."""
        pass

    @abstractmethod
    async def list_due(self, now: datetime, grace_window_days: int) -> list[AssessmentInstance]:
        """Non-terminal instances with ``now - grace <= due_date <= now``."""
        pass

    @abstractmethod
    async def list_overdue(self, now: datetime, grace_window_days: int) -> list[AssessmentInstance]:
        """Non-terminal instances with ``due_date < now - grace`` and ``expires_at > now``."""
        pass

    @abstractmethod
    async def count_due_between(self, start: datetime, end: datetime) -> int:
        """Non-cancelled instances whose due date falls in ``[start, end]``."""
        pass

    @abstractmethod
    async def count_completed_between(self, start: datetime, end: datetime) -> int:
        """
        COMPLETED instances whose due date falls in ``[start, end]``.

        Always a subset of the instances counted by ``count_due_between``.
        """
        pass

    @abstractmethod
    async def list_pending_due_before(self, until: datetime, now: datetime) -> list[AssessmentInstance]:
        """PENDING, unexpired instances due no later than ``until``."""
        pass

    @abstractmethod
    async def list_for_patient(
        self,
        patient_id: UUID,
        statuses: Iterable[InstanceStatus] | None = None,
    ) -> list[AssessmentInstance]:
        pass

    @abstractmethod
    async def list_for_encounter(self, encounter_id: UUID) -> list[AssessmentInstance]:
        pass
