"""SQLAlchemy implementation of the encounter repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.exc import SQLAlchemyError

from mbc_tracker.core.interfaces.repositories.encounter_repository_interface import (
    IEncounterRepository,
)
from mbc_tracker.domain.entities.encounter import Encounter, EncounterStatus
from mbc_tracker.domain.exceptions import EntityNotFoundError
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.assessment_instance import (
    AssessmentInstanceModel,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.encounter import EncounterModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.base_repository import (
    BaseSQLAlchemyRepository,
)


class SQLAlchemyEncounterRepository(
    BaseSQLAlchemyRepository[Encounter, EncounterModel], IEncounterRepository
):
    model_class = EncounterModel

    async def create(self, encounter: Encounter) -> Encounter:
        return await self._add(encounter)

    async def get_by_id(self, encounter_id: UUID) -> Encounter | None:
        return await super().get_by_id(encounter_id)

    async def update(self, encounter: Encounter) -> Encounter:
        try:
            result = await self._session.execute(
                update(EncounterModel)
                .where(EncounterModel.id == encounter.id)
                .values(
                    scheduled_at=encounter.scheduled_at,
                    status=encounter.status.value,
                    reason=encounter.reason,
                    cancelled_at=encounter.cancelled_at,
                )
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            raise self._error("update", e) from e
        if result.rowcount == 0:
            raise EntityNotFoundError("Encounter", str(encounter.id))
        return encounter

    async def list_for_patient(self, patient_id: UUID) -> list[Encounter]:
        try:
            result = await self._session.execute(
                select(EncounterModel)
                .where(EncounterModel.patient_id == patient_id)
                .order_by(EncounterModel.scheduled_at)
            )
            return [self._to_entity(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._error("list_for_patient", e) from e

    async def list_upcoming_without_instances(
        self, start: datetime, end: datetime
    ) -> list[Encounter]:
        has_instances = exists().where(AssessmentInstanceModel.encounter_id == EncounterModel.id)
        query = (
            select(EncounterModel)
            .where(
                EncounterModel.scheduled_at >= start,
                EncounterModel.scheduled_at <= end,
                EncounterModel.status != EncounterStatus.CANCELLED.value,
                ~has_instances,
            )
            .order_by(EncounterModel.scheduled_at)
        )
        try:
            result = await self._session.execute(query)
            return [self._to_entity(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._error("list_upcoming_without_instances", e) from e

    def _to_entity(self, model: EncounterModel) -> Encounter:
        return Encounter(
            id=model.id,
            patient_id=model.patient_id,
            scheduled_at=model.scheduled_at,
            status=EncounterStatus(model.status),
            reason=model.reason,
            cancelled_at=model.cancelled_at,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Encounter) -> EncounterModel:
        return EncounterModel(
            id=entity.id,
            patient_id=entity.patient_id,
            scheduled_at=entity.scheduled_at,
            status=entity.status.value,
            reason=entity.reason,
            cancelled_at=entity.cancelled_at,
            created_at=entity.created_at,
        )
