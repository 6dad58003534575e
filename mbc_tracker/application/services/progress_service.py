"""
Patient progress service.

Builds the clinician's view of a patient's score history per measure, with
a simple trend classification and the assessments still outstanding.
"""

import logging
from typing import Any
from uuid import UUID

from mbc_tracker.core.constants.audit import AuditEventType, AuditResourceType
from mbc_tracker.core.interfaces.services.audit_logger_interface import IAuditLogger
from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, format_date_iso, utcnow
from mbc_tracker.domain.entities.assessment_instance import NON_TERMINAL_STATUSES
from mbc_tracker.domain.exceptions import EntityNotFoundError
from mbc_tracker.domain.services.scoring import severity_description
from mbc_tracker.domain.services.trends import calculate_trend

logger = logging.getLogger(__name__)


class ProgressService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        audit_logger: IAuditLogger,
        clock: Clock = utcnow,
    ):
        self._uow_factory = uow_factory
        self._audit = audit_logger
        self._clock = clock

    async def patient_progress(
        self, patient_id: UUID, actor_id: str | None = None
    ) -> dict[str, Any]:
        """
        Score history, trends and outstanding assessments for one patient.

        Viewing the chart is itself an audited event.

        Raises:
            EntityNotFoundError: Unknown patient
        """
        now = self._clock()
        async with self._uow_factory() as uow:
            patient = await uow.patients.get_by_id(patient_id)
            if patient is None:
                raise EntityNotFoundError("Patient", str(patient_id))
            responses = await uow.responses.list_for_patient(patient_id)
            open_instances = await uow.instances.list_for_patient(
                patient_id, statuses=NON_TERMINAL_STATUSES
            )
            encounters = await uow.encounters.list_for_patient(patient_id)

        by_measure: dict[str, list] = {}
        for measure_name, response in responses:
            by_measure.setdefault(measure_name, []).append(response)

        measures = {}
        for measure_name, history in by_measure.items():
            latest = history[-1]
            measures[measure_name] = {
                "data": [
                    {
                        "date": format_date_iso(r.completed_at),
                        "score": r.total_score,
                        "severity": r.severity_label,
                    }
                    for r in history
                ],
                "trend": calculate_trend([r.total_score for r in history]).value,
                "latest_score": latest.total_score,
                "latest_band": latest.severity_label,
                "latest_description": severity_description(latest.severity_label),
            }

        # Links the sweep has not caught yet are already dead
        pending = [
            {
                "instance_id": str(instance.id),
                "measure_name": instance.measure_name,
                "status": instance.status.value,
                "due_date": format_date_iso(instance.due_date),
                "expires_at": format_date_iso(instance.expires_at),
            }
            for instance in open_instances
            if not instance.is_expired(now)
        ]

        await self._audit.log_event(
            AuditEventType.CLINICIAN_VIEWED_CHART,
            actor_id=actor_id,
            patient_id=str(patient_id),
            resource_type=AuditResourceType.PATIENT,
            resource_id=str(patient_id),
        )

        return {
            "patient": {"id": str(patient.id), "name": patient.full_name},
            "measures": measures,
            "pending": pending,
            "encounters": [
                {
                    "id": str(encounter.id),
                    "scheduled_at": format_date_iso(encounter.scheduled_at),
                    "status": encounter.status.value,
                }
                for encounter in encounters
            ],
            "response_count": len(responses),
        }
