"""SQLAlchemy model for compliance policies."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mbc_tracker.core.utils.date_utils import utcnow
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import (
    GUID,
    JSONEncodedDict,
    UTCDateTime,
)


class PolicyModel(Base, TimestampMixin):
    __tablename__ = "mbc_policies"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    # One row per name; get-or-create relies on this constraint
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    cadence_days: Mapped[int] = mapped_column(Integer, nullable=False)
    grace_window_days: Mapped[int] = mapped_column(Integer, nullable=False)
    expiration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    measures_required: Mapped[list] = mapped_column(JSONEncodedDict, nullable=False)
    require_at_intake: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<PolicyModel(name='{self.name}', cadence={self.cadence_days})>"
