"""
Instance generator.

Creates assessment instances for a patient according to the active policy:
one instance per required measure, with the policy's due/expiration
arithmetic and a fresh unguessable access token.

Generation for an encounter is idempotent. A measure already instantiated
for the (patient, encounter) pair is skipped, both by an explicit check and
by the uniqueness constraint that backs it when two runs overlap.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from mbc_tracker.core.constants.audit import AuditEventType, AuditResourceType
from mbc_tracker.core.interfaces.services.audit_logger_interface import IAuditLogger
from mbc_tracker.core.interfaces.services.scorer_interface import IScorer
from mbc_tracker.core.interfaces.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, add_days, as_utc, format_date_iso, utcnow
from mbc_tracker.domain.entities.assessment_instance import AssessmentInstance
from mbc_tracker.domain.entities.measure import Measure
from mbc_tracker.domain.entities.policy import Policy
from mbc_tracker.domain.exceptions import (
    AlreadyScheduledError,
    EntityNotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_access_token() -> str:
    """Cryptographically random, URL-safe access token (256 bits)."""
    return secrets.token_urlsafe(TOKEN_BYTES)


@dataclass
class UpcomingGenerationResult:
    encounters_processed: int = 0
    instances_created: int = 0
    failures: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "encounters_processed": self.encounters_processed,
            "instances_created": self.instances_created,
            "failures": self.failures,
        }


async def seed_measures(uow_factory: UnitOfWorkFactory, scorer: IScorer) -> list[Measure]:
    """Upsert every measure in the scorer's catalog into the measure store."""
    async with uow_factory() as uow:
        seeded = [
            await uow.measures.upsert(scorer.get_measure(name)) for name in scorer.known_measures()
        ]
    logger.info(f"Seeded {len(seeded)} measures")
    return seeded


class InstanceGenerator:
    """Turns the active policy into scheduled assessment instances."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        policy: Policy,
        scorer: IScorer,
        audit_logger: IAuditLogger,
        clock: Clock = utcnow,
        token_factory: Callable[[], str] = generate_access_token,
    ):
        """
        Initialize the generator.

        Args:
            uow_factory: Creates one unit of work per generation call
            policy: The active policy, resolved by the caller
            scorer: Measure catalog used to create missing measure records
            audit_logger: Audit sink for INSTANCE_CREATED events
            clock: Source of "now"
            token_factory: Produces access tokens
        """
        self._uow_factory = uow_factory
        self.policy = policy
        self._scorer = scorer
        self._audit = audit_logger
        self._clock = clock
        self._token_factory = token_factory

    async def generate_instances(
        self,
        patient_id: UUID,
        encounter_id: UUID | None = None,
        due_date: datetime | None = None,
        actor_id: str | None = None,
    ) -> list[AssessmentInstance]:
        """
        Create one instance per required measure for a patient.

        Args:
            patient_id: Owning patient; must exist
            encounter_id: Originating encounter; must belong to the patient
            due_date: When the assessments are due; defaults to now (intake)
            actor_id: Who triggered the generation, for the audit trail

        Returns:
            list[AssessmentInstance]: Newly created instances only; measures
            already scheduled for the encounter are skipped

        Raises:
            EntityNotFoundError: Unknown patient or encounter
            ValidationFailedError: A required measure is unknown
        """
        due = as_utc(due_date) if due_date is not None else self._clock()
        expires_at = add_days(due, self.policy.expiration_days)
        created: list[AssessmentInstance] = []

        async with self._uow_factory() as uow:
            patient = await uow.patients.get_by_id(patient_id)
            if patient is None:
                raise EntityNotFoundError("Patient", str(patient_id))

            if encounter_id is not None:
                encounter = await uow.encounters.get_by_id(encounter_id)
                if encounter is None or encounter.patient_id != patient_id:
                    raise EntityNotFoundError("Encounter", str(encounter_id))

            for measure_name in self.policy.measures_required:
                measure = await self._resolve_measure(uow, measure_name)

                if encounter_id is not None and await uow.instances.exists_for(
                    patient_id, measure.id, encounter_id
                ):
                    logger.debug(f"{measure.name} already scheduled for encounter {encounter_id}")
                    continue

                instance = AssessmentInstance(
                    patient_id=patient_id,
                    measure_id=measure.id,
                    encounter_id=encounter_id,
                    token=self._token_factory(),
                    due_date=due,
                    expires_at=expires_at,
                    measure_name=measure.name,
                )
                try:
                    await uow.instances.add(instance)
                except AlreadyScheduledError:
                    # Lost a race with a concurrent run for the same encounter
                    logger.debug(f"{measure.name} scheduled concurrently for {encounter_id}")
                    continue
                created.append(instance)

        for instance in created:
            logger.info(f"Created instance {instance.id} ({instance.measure_name}) status=PENDING")
            await self._audit.log_event(
                AuditEventType.INSTANCE_CREATED,
                actor_id=actor_id,
                patient_id=str(patient_id),
                resource_type=AuditResourceType.ASSESSMENT_INSTANCE,
                resource_id=str(instance.id),
                metadata={
                    "measure_id": str(instance.measure_id),
                    "measure_name": instance.measure_name,
                    "encounter_id": str(encounter_id) if encounter_id else None,
                    "due_date": format_date_iso(instance.due_date),
                },
            )
        return created

    async def generate_upcoming(self, days_ahead: int) -> UpcomingGenerationResult:
        """
        Generate instances for encounters in the next ``days_ahead`` days.

        Only encounters with no instances at all are picked up, so an
        encounter is either fully generated or left alone.
        """
        now = self._clock()
        async with self._uow_factory() as uow:
            encounters = await uow.encounters.list_upcoming_without_instances(
                now, now + timedelta(days=days_ahead)
            )

        result = UpcomingGenerationResult()
        for encounter in encounters:
            try:
                created = await self.generate_instances(
                    encounter.patient_id,
                    encounter_id=encounter.id,
                    due_date=encounter.scheduled_at,
                    actor_id="system",
                )
            except (EntityNotFoundError, ValidationFailedError) as e:
                logger.error(f"Generation failed for encounter {encounter.id}: {e.message}")
                result.failures.append({"encounter_id": str(encounter.id), "error": e.message})
                continue
            result.encounters_processed += 1
            result.instances_created += len(created)

        logger.info(
            f"Upcoming generation: {result.encounters_processed} encounters, "
            f"{result.instances_created} instances created"
        )
        return result

    async def create_intake_assessments(
        self, patient_id: UUID, actor_id: str | None = None
    ) -> list[AssessmentInstance]:
        """Instances due now for a newly enrolled patient, if the policy asks for them."""
        if not self.policy.require_at_intake:
            return []
        return await self.generate_instances(patient_id, actor_id=actor_id)

    async def schedule_next_assessments(
        self, patient_id: UUID, actor_id: str | None = None
    ) -> list[AssessmentInstance]:
        """Next recurring round, due one cadence from now."""
        due = add_days(self._clock(), self.policy.cadence_days)
        return await self.generate_instances(patient_id, due_date=due, actor_id=actor_id)

    async def _resolve_measure(self, uow: IUnitOfWork, measure_name: str) -> Measure:
        measure = await uow.measures.get_by_name(measure_name)
        if measure is not None:
            return measure
        # Raises ValidationFailedError for names outside the catalog
        return await uow.measures.upsert(self._scorer.get_measure(measure_name))
