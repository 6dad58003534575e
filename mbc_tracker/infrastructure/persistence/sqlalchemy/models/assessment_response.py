"""SQLAlchemy model for completed questionnaire responses."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import (
    GUID,
    JSONEncodedDict,
    UTCDateTime,
)


class AssessmentResponseModel(Base, TimestampMixin):
    __tablename__ = "assessment_responses"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    # At most one response per instance
    instance_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("assessment_instances.id"), nullable=False, unique=True
    )
    # [{"questionNum": n, "value": v}, ...]
    answers: Mapped[list] = mapped_column(JSONEncodedDict, nullable=False)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False)
    severity_label: Mapped[str] = mapped_column(String(50), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        return f"<AssessmentResponseModel(instance_id={self.instance_id})>"
