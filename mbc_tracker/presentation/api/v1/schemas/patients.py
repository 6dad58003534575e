"""
API schemas for patient enrollment and encounters.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from mbc_tracker.domain.entities.encounter import Encounter
from mbc_tracker.presentation.api.v1.schemas.instances import InstanceResponse


class PatientCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str | None = Field(None, max_length=255, description="Destination for assessment links")
    phone: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    actor_id: str | None = None


class PatientCreatedResponse(BaseModel):
    id: UUID
    full_name: str
    intake_instances: list[InstanceResponse]


class EncounterCreateRequest(BaseModel):
    scheduled_at: datetime
    reason: str | None = Field(None, max_length=500)
    actor_id: str | None = None


class EncounterResponse(BaseModel):
    id: UUID
    patient_id: UUID
    scheduled_at: datetime
    status: str
    reason: str | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_entity(cls, encounter: Encounter) -> "EncounterResponse":
        return cls(
            id=encounter.id,
            patient_id=encounter.patient_id,
            scheduled_at=encounter.scheduled_at,
            status=encounter.status.value,
            reason=encounter.reason,
            cancelled_at=encounter.cancelled_at,
        )
