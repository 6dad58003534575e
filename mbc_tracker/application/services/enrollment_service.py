"""
Enrollment service.

Registers patients and schedules or cancels their encounters. Registration
triggers intake generation; scheduled encounters are picked up later by the
upcoming-encounter batch.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from mbc_tracker.application.services.instance_generator import InstanceGenerator
from mbc_tracker.core.constants.audit import AuditEventType, AuditResourceType
from mbc_tracker.core.interfaces.services.audit_logger_interface import IAuditLogger
from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, as_utc, format_date_iso, utcnow
from mbc_tracker.domain.entities.assessment_instance import AssessmentInstance
from mbc_tracker.domain.entities.encounter import Encounter
from mbc_tracker.domain.entities.patient import Patient
from mbc_tracker.domain.exceptions import EntityNotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)


@dataclass
class Enrollment:
    patient: Patient
    intake_instances: list[AssessmentInstance]


class EnrollmentService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        generator: InstanceGenerator,
        audit_logger: IAuditLogger,
        clock: Clock = utcnow,
    ):
        self._uow_factory = uow_factory
        self._generator = generator
        self._audit = audit_logger
        self._clock = clock

    async def register_patient(
        self,
        first_name: str,
        last_name: str,
        email: str | None = None,
        phone: str | None = None,
        date_of_birth: date | None = None,
        actor_id: str | None = None,
    ) -> Enrollment:
        """
        Create a patient and run intake generation.

        Args:
            first_name: Patient first name
            last_name: Patient last name
            email: Destination for magic links
            phone: Optional phone number
            date_of_birth: Optional date of birth
            actor_id: Clinician or system registering the patient

        Returns:
            Enrollment: The patient and any intake instances created

        Raises:
            ValidationFailedError: Missing name
        """
        if not first_name.strip() or not last_name.strip():
            raise ValidationFailedError("First and last name are required", field="name")

        patient = Patient(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            phone=phone,
            date_of_birth=date_of_birth,
            created_at=self._clock(),
        )
        async with self._uow_factory() as uow:
            await uow.patients.create(patient)

        logger.info(f"Registered patient {patient.id}")
        await self._audit.log_event(
            AuditEventType.PATIENT_CREATED,
            actor_id=actor_id,
            patient_id=str(patient.id),
            resource_type=AuditResourceType.PATIENT,
            resource_id=str(patient.id),
        )

        intake = await self._generator.create_intake_assessments(patient.id, actor_id=actor_id)
        return Enrollment(patient=patient, intake_instances=intake)

    async def schedule_encounter(
        self,
        patient_id: UUID,
        scheduled_at: datetime,
        reason: str | None = None,
        actor_id: str | None = None,
    ) -> Encounter:
        encounter = Encounter(
            patient_id=patient_id,
            scheduled_at=as_utc(scheduled_at),
            reason=reason,
            created_at=self._clock(),
        )
        async with self._uow_factory() as uow:
            if await uow.patients.get_by_id(patient_id) is None:
                raise EntityNotFoundError("Patient", str(patient_id))
            await uow.encounters.create(encounter)

        logger.info(f"Scheduled encounter {encounter.id}")
        await self._audit.log_event(
            AuditEventType.APPOINTMENT_CREATED,
            actor_id=actor_id,
            patient_id=str(patient_id),
            resource_type=AuditResourceType.ENCOUNTER,
            resource_id=str(encounter.id),
            metadata={"scheduled_at": format_date_iso(encounter.scheduled_at)},
        )
        return encounter

    async def cancel_encounter(
        self,
        encounter_id: UUID,
        patient_id: UUID | None = None,
        actor_id: str | None = None,
    ) -> Encounter:
        """
        Cancel an encounter.

        Instances already generated for it are left alone; cancel them
        individually if needed.
        """
        async with self._uow_factory() as uow:
            encounter = await uow.encounters.get_by_id(encounter_id)
            if encounter is None or (patient_id is not None and encounter.patient_id != patient_id):
                raise EntityNotFoundError("Encounter", str(encounter_id))
            already_cancelled = encounter.is_cancelled
            encounter.cancel(self._clock())
            if not already_cancelled:
                await uow.encounters.update(encounter)

        if not already_cancelled:
            logger.info(f"Cancelled encounter {encounter.id}")
            await self._audit.log_event(
                AuditEventType.APPOINTMENT_CANCELLED,
                actor_id=actor_id,
                patient_id=str(encounter.patient_id),
                resource_type=AuditResourceType.ENCOUNTER,
                resource_id=str(encounter.id),
            )
        return encounter
