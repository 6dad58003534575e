"""
API schemas for assessment instances.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from mbc_tracker.domain.entities.assessment_instance import AssessmentInstance


class InstanceResponse(BaseModel):
    """Assessment instance as exposed to clinicians and operators (never the token)."""

    id: UUID
    patient_id: UUID
    measure_id: UUID
    measure_name: str | None = None
    encounter_id: UUID | None = None
    status: str
    due_date: datetime
    expires_at: datetime
    sent_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, instance: AssessmentInstance) -> "InstanceResponse":
        return cls(
            id=instance.id,
            patient_id=instance.patient_id,
            measure_id=instance.measure_id,
            measure_name=instance.measure_name,
            encounter_id=instance.encounter_id,
            status=instance.status.value,
            due_date=instance.due_date,
            expires_at=instance.expires_at,
            sent_at=instance.sent_at,
            started_at=instance.started_at,
            completed_at=instance.completed_at,
        )


class CancelInstanceRequest(BaseModel):
    reason: str | None = Field(None, max_length=500, description="Why the assessment was cancelled")
    actor_id: str | None = Field(None, description="Clinician or administrator cancelling")


class SendResultResponse(BaseModel):
    success: bool
    message_id: str | None = None
    error: str | None = None
