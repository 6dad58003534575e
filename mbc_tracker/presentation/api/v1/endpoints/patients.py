"""
Patient enrollment, encounter scheduling and progress endpoints.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from mbc_tracker.application.services import EnrollmentService, ProgressService
from mbc_tracker.presentation.api.dependencies import (
    get_enrollment_service,
    get_progress_service,
)
from mbc_tracker.presentation.api.v1.schemas.instances import InstanceResponse
from mbc_tracker.presentation.api.v1.schemas.patients import (
    EncounterCreateRequest,
    EncounterResponse,
    PatientCreatedResponse,
    PatientCreateRequest,
)

router = APIRouter()

EnrollmentDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]


@router.post("", response_model=PatientCreatedResponse, status_code=status.HTTP_201_CREATED)
async def register_patient(
    payload: PatientCreateRequest, enrollment: EnrollmentDep
) -> PatientCreatedResponse:
    """Register a patient; intake assessments are generated when the policy requires them."""
    result = await enrollment.register_patient(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        phone=payload.phone,
        date_of_birth=payload.date_of_birth,
        actor_id=payload.actor_id,
    )
    return PatientCreatedResponse(
        id=result.patient.id,
        full_name=result.patient.full_name,
        intake_instances=[InstanceResponse.from_entity(i) for i in result.intake_instances],
    )


@router.post(
    "/{patient_id}/encounters",
    response_model=EncounterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def schedule_encounter(
    patient_id: UUID, payload: EncounterCreateRequest, enrollment: EnrollmentDep
) -> EncounterResponse:
    encounter = await enrollment.schedule_encounter(
        patient_id, payload.scheduled_at, reason=payload.reason, actor_id=payload.actor_id
    )
    return EncounterResponse.from_entity(encounter)


@router.post("/{patient_id}/encounters/{encounter_id}/cancel", response_model=EncounterResponse)
async def cancel_encounter(
    patient_id: UUID, encounter_id: UUID, enrollment: EnrollmentDep
) -> EncounterResponse:
    encounter = await enrollment.cancel_encounter(encounter_id, patient_id=patient_id)
    return EncounterResponse.from_entity(encounter)


@router.get("/{patient_id}/progress")
async def get_patient_progress(
    patient_id: UUID,
    progress: Annotated[ProgressService, Depends(get_progress_service)],
    actor_id: str | None = None,
) -> dict[str, Any]:
    return await progress.patient_progress(patient_id, actor_id=actor_id)
