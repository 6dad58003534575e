"""
Audit logging service.

This service is the audit sink used by every mutation path, plus the
reporting side (search and CSV export) used for compliance reviews.

Writes are best-effort: each event is stored in its own short transaction,
after the operation it describes has committed, and a failed write is logged
and counted but never raised. The primary workflow stays available even
when the audit store does not.
"""

import csv
import io
import logging
from datetime import datetime
from typing import Any

from mbc_tracker.core.constants.audit import AuditEventType, AuditResourceType
from mbc_tracker.core.interfaces.services.audit_logger_interface import IAuditLogger
from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, format_date_iso, utcnow
from mbc_tracker.domain.entities.audit_event import AuditEvent
from mbc_tracker.domain.exceptions import AuditWriteFailedError, RepositoryError
from mbc_tracker.infrastructure.logging.audit_logger import AuditLogger

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_LIMIT = 1000

CSV_COLUMNS = [
    "Timestamp",
    "Event Type",
    "Actor ID",
    "Patient ID",
    "Resource Type",
    "Resource ID",
    "IP Address",
]


class AuditLogService(IAuditLogger):
    """Audit sink and audit trail reporting."""

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock = utcnow):
        """
        Initialize the audit logging service.

        Args:
            uow_factory: Creates the unit of work used for each audit write
            clock: Source of event timestamps
        """
        self._uow_factory = uow_factory
        self._clock = clock
        # Operators monitor this alongside the AUDIT_WRITE_FAILED log lines
        self.failed_writes = 0

    async def log_event(
        self,
        event_type: AuditEventType,
        *,
        actor_id: str | None = None,
        patient_id: str | None = None,
        resource_type: AuditResourceType | None = None,
        resource_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditEvent | None:
        event = AuditEvent(
            timestamp=self._clock(),
            event_type=_value(event_type),
            actor_id=actor_id,
            patient_id=str(patient_id) if patient_id is not None else None,
            resource_type=_value(resource_type) if resource_type is not None else None,
            resource_id=str(resource_id) if resource_id is not None else None,
            metadata=metadata,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        try:
            async with self._uow_factory() as uow:
                await uow.audit_events.add(event)
        except (AuditWriteFailedError, RepositoryError) as e:
            self.failed_writes += 1
            AuditLogger.log_write_failure(
                event.event_type, e, resource_id=event.resource_id, failed_writes=self.failed_writes
            )
            return None

        AuditLogger.log_event(event)
        return event

    async def search(
        self,
        patient_id: str | None = None,
        event_type: AuditEventType | str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        limit: int = DEFAULT_EXPORT_LIMIT,
    ) -> list[AuditEvent]:
        """
        Search the audit trail, newest first.

        Args:
            patient_id: Only events about this patient
            event_type: Only events of this kind
            start_time: Inclusive lower bound
            end_time: Inclusive upper bound
            limit: Maximum number of events

        Returns:
            list[AuditEvent]: Matching events
        """
        async with self._uow_factory() as uow:
            return await uow.audit_events.search(
                patient_id=str(patient_id) if patient_id else None,
                event_type=_value(event_type) if event_type else None,
                start_time=start_time,
                end_time=end_time,
                limit=limit,
            )

    async def export_csv(self, **filters: Any) -> str:
        """Search with ``filters`` and render the result as CSV."""
        events = await self.search(**filters)
        return events_to_csv(events)


def events_to_csv(events: list[AuditEvent]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for event in events:
        writer.writerow(
            [
                format_date_iso(event.timestamp),
                event.event_type,
                event.actor_id or "",
                event.patient_id or "",
                event.resource_type or "",
                event.resource_id or "",
                event.ip_address or "",
            ]
        )
    return buffer.getvalue()


def _value(item: Any) -> str:
    return item.value if hasattr(item, "value") else str(item)
