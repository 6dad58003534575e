"""
SQLAlchemy model for audit events.

Append-only: repositories never issue UPDATE or DELETE against this table.
"""

import uuid
from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import (
    GUID,
    JSONEncodedDict,
    UTCDateTime,
)


class AuditEventModel(Base):
    """Represents an entry in the audit trail."""

    __tablename__ = "audit_events"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    actor_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Plain string rather than a foreign key; audit rows outlive any referenced record
    patient_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    resource_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    resource_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[dict | None] = mapped_column("metadata", JSONEncodedDict, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AuditEventModel(id={self.id}, timestamp='{self.timestamp}', "
            f"event_type='{self.event_type}')>"
        )
