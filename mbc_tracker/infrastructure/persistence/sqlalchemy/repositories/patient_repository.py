"""SQLAlchemy implementation of the patient repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from mbc_tracker.core.interfaces.repositories.patient_repository_interface import (
    IPatientRepository,
)
from mbc_tracker.domain.entities.patient import Patient
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.patient import PatientModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.base_repository import (
    BaseSQLAlchemyRepository,
)


class SQLAlchemyPatientRepository(
    BaseSQLAlchemyRepository[Patient, PatientModel], IPatientRepository
):
    model_class = PatientModel

    async def create(self, patient: Patient) -> Patient:
        return await self._add(patient)

    async def get_by_id(self, patient_id: UUID) -> Patient | None:
        return await super().get_by_id(patient_id)

    async def get_many(self, patient_ids: list[UUID]) -> dict[UUID, Patient]:
        if not patient_ids:
            return {}
        try:
            result = await self._session.execute(
                select(PatientModel).where(PatientModel.id.in_(set(patient_ids)))
            )
            return {model.id: self._to_entity(model) for model in result.scalars().all()}
        except SQLAlchemyError as e:
            raise self._error("get_many", e) from e

    def _to_entity(self, model: PatientModel) -> Patient:
        return Patient(
            id=model.id,
            first_name=model.first_name,
            last_name=model.last_name,
            email=model.email,
            phone=model.phone,
            date_of_birth=model.date_of_birth,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Patient) -> PatientModel:
        return PatientModel(
            id=entity.id,
            first_name=entity.first_name,
            last_name=entity.last_name,
            email=entity.email,
            phone=entity.phone,
            date_of_birth=entity.date_of_birth,
            created_at=entity.created_at,
        )
