"""
Audit Event domain entity.

This module defines the immutable, append-only record written for every
state transition and clinical record change.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuditEvent(BaseModel):
    """
    Domain entity representing an audit event.

    Events are never updated or deleted once written; the model is frozen
    so nothing downstream can mutate a recorded event either.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    event_type: str
    actor_id: str | None = None
    patient_id: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    metadata: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Ensure the timestamp has a timezone."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    def to_log_dict(self) -> dict[str, Any]:
        """Serializable form mirrored to the audit log file."""
        return self.model_dump(mode="json")
