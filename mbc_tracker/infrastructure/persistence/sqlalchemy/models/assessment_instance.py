"""SQLAlchemy model for assessment instances."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.measure import MeasureModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import GUID, UTCDateTime


class AssessmentInstanceModel(Base, TimestampMixin):
    """
    One scheduled measure for one patient.

    The (patient, measure, encounter) constraint makes per-encounter
    generation idempotent. Rows without an encounter never collide because
    SQL treats NULLs as distinct.
    """

    __tablename__ = "assessment_instances"
    __table_args__ = (
        UniqueConstraint("patient_id", "measure_id", "encounter_id"),
        Index("ix_assessment_instances_status_due_date", "status", "due_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("patients.id"), nullable=False, index=True
    )
    measure_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("measures.id"), nullable=False
    )
    encounter_id: Mapped[uuid.UUID | None] = mapped_column(
        GUID(), ForeignKey("encounters.id"), nullable=True, index=True
    )
    due_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    sent_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    measure: Mapped[MeasureModel] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<AssessmentInstanceModel(id={self.id}, status='{self.status}')>"
