"""
Repository for audit events.

This repository handles database operations for audit events, providing a
clean abstraction over the persistence layer for the audit sink. It only
ever inserts and reads.
"""

import uuid
from datetime import datetime

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mbc_tracker.core.interfaces.repositories.audit_event_repository_interface import (
    IAuditEventRepository,
)
from mbc_tracker.core.utils.logging import get_logger
from mbc_tracker.domain.entities.audit_event import AuditEvent
from mbc_tracker.domain.exceptions import AuditWriteFailedError, RepositoryError
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.audit_event import AuditEventModel

logger = get_logger(__name__)


class SQLAlchemyAuditEventRepository(IAuditEventRepository):
    """
    Audit event persistence operations.

    Write failures surface as ``AuditWriteFailedError`` so the audit service
    can log and count them without knowing about SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, event: AuditEvent) -> str:
        model = AuditEventModel(
            id=uuid.UUID(event.id),
            timestamp=event.timestamp,
            event_type=event.event_type,
            actor_id=event.actor_id,
            patient_id=event.patient_id,
            resource_type=event.resource_type,
            resource_id=event.resource_id,
            event_metadata=event.metadata,
            ip_address=event.ip_address,
            user_agent=event.user_agent,
        )
        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            raise AuditWriteFailedError(event.event_type, original_exception=e) from e
        return str(model.id)

    async def search(
        self,
        patient_id: str | None = None,
        event_type: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        limit: int = 1000,
    ) -> list[AuditEvent]:
        query = select(AuditEventModel).order_by(desc(AuditEventModel.timestamp))

        filter_conditions = []
        if patient_id:
            filter_conditions.append(AuditEventModel.patient_id == patient_id)
        if event_type:
            filter_conditions.append(AuditEventModel.event_type == event_type)
        if start_time:
            filter_conditions.append(AuditEventModel.timestamp >= start_time)
        if end_time:
            filter_conditions.append(AuditEventModel.timestamp <= end_time)

        if filter_conditions:
            query = query.where(*filter_conditions)
        query = query.limit(limit)

        try:
            result = await self._session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Error searching audit events: {e}")
            raise RepositoryError(
                "Failed to search audit events",
                repository=type(self).__name__,
                operation="search",
                original_exception=e,
            ) from e
        return [self._to_entity(model) for model in result.scalars().all()]

    @staticmethod
    def _to_entity(model: AuditEventModel) -> AuditEvent:
        return AuditEvent(
            id=str(model.id),
            timestamp=model.timestamp,
            event_type=model.event_type,
            actor_id=model.actor_id,
            patient_id=model.patient_id,
            resource_type=model.resource_type,
            resource_id=model.resource_id,
            metadata=model.event_metadata,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
        )
