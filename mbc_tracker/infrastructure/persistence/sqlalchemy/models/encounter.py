"""SQLAlchemy model for scheduled encounters."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import GUID, UTCDateTime


class EncounterModel(Base, TimestampMixin):
    __tablename__ = "encounters"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("patients.id"), nullable=False, index=True
    )
    scheduled_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="SCHEDULED")
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    def __repr__(self) -> str:
        return f"<EncounterModel(id={self.id}, status='{self.status}')>"
