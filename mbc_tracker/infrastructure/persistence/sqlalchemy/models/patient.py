"""SQLAlchemy model for patients."""

import uuid
from datetime import date

from sqlalchemy import Date, String
from sqlalchemy.orm import Mapped, mapped_column

from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import GUID


class PatientModel(Base, TimestampMixin):
    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        # No names or contact details in reprs
        return f"<PatientModel(id={self.id})>"
