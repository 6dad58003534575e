"""
Interface for the Audit Event Repository.

This module defines the interface for the append-only audit store.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from mbc_tracker.domain.entities.audit_event import AuditEvent


class IAuditEventRepository(ABC):
    """
    Interface for audit event repositories.

    There is deliberately no update or delete operation.
    """

    @abstractmethod
    async def add(self, event: AuditEvent) -> str:
        """
        Append an audit event.

        Args:
            event: The event to persist

        Returns:
            str: ID of the stored event

        Raises:
            AuditWriteFailedError: If the event could not be written
        """
        pass

    @abstractmethod
    async def search(
        self,
        patient_id: str | None = None,
        event_type: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        limit: int = 1000,
    ) -> list[AuditEvent]:
        """
        Search audit events, newest first.

        Args:
            patient_id: Restrict to events about one patient
            event_type: Restrict to one event kind
            start_time: Inclusive lower bound on the timestamp
            end_time: Inclusive upper bound on the timestamp
            limit: Maximum number of events to return

        Returns:
            list[AuditEvent]: Matching events
        """
        pass
