"""SQLAlchemy model for measure definitions."""

import uuid

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import GUID, JSONEncodedDict


class MeasureModel(Base, TimestampMixin):
    __tablename__ = "measures"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    min_score: Mapped[int] = mapped_column(Integer, nullable=False)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False)
    # [{"number", "text", "min_value", "max_value"}, ...]
    questions: Mapped[list] = mapped_column(JSONEncodedDict, nullable=False)
    # [{"label", "min_score", "max_score"}, ...]
    severity_bands: Mapped[list] = mapped_column(JSONEncodedDict, nullable=False)

    def __repr__(self) -> str:
        return f"<MeasureModel(name='{self.name}')>"
