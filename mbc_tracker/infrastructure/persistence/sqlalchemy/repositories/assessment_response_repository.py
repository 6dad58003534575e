"""SQLAlchemy implementation of the assessment response repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mbc_tracker.core.interfaces.repositories.response_repository_interface import (
    IAssessmentResponseRepository,
)
from mbc_tracker.domain.entities.assessment_response import Answer, AssessmentResponse
from mbc_tracker.domain.exceptions import InstanceAlreadyCompletedError
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.assessment_instance import (
    AssessmentInstanceModel,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.assessment_response import (
    AssessmentResponseModel,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.measure import MeasureModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.base_repository import (
    BaseSQLAlchemyRepository,
)


class SQLAlchemyAssessmentResponseRepository(
    BaseSQLAlchemyRepository[AssessmentResponse, AssessmentResponseModel],
    IAssessmentResponseRepository,
):
    model_class = AssessmentResponseModel

    async def add(self, response: AssessmentResponse) -> AssessmentResponse:
        try:
            self._session.add(self._to_model(response))
            await self._session.flush()
        except IntegrityError as e:
            # unique(instance_id): a response already exists
            raise InstanceAlreadyCompletedError(
                instance_id=str(response.instance_id), attempted="submit"
            ) from e
        except SQLAlchemyError as e:
            raise self._error("add", e) from e
        return response

    async def get_by_instance_id(self, instance_id: UUID) -> AssessmentResponse | None:
        try:
            result = await self._session.execute(
                select(AssessmentResponseModel).where(
                    AssessmentResponseModel.instance_id == instance_id
                )
            )
            model = result.scalars().first()
            return self._to_entity(model) if model else None
        except SQLAlchemyError as e:
            raise self._error("get_by_instance_id", e) from e

    async def list_for_patient(self, patient_id: UUID) -> list[tuple[str, AssessmentResponse]]:
        query = (
            select(MeasureModel.name, AssessmentResponseModel)
            .join(
                AssessmentInstanceModel,
                AssessmentInstanceModel.id == AssessmentResponseModel.instance_id,
            )
            .join(MeasureModel, MeasureModel.id == AssessmentInstanceModel.measure_id)
            .where(AssessmentInstanceModel.patient_id == patient_id)
            .order_by(AssessmentResponseModel.completed_at)
        )
        try:
            result = await self._session.execute(query)
            return [(name, self._to_entity(model)) for name, model in result.all()]
        except SQLAlchemyError as e:
            raise self._error("list_for_patient", e) from e

    def _to_entity(self, model: AssessmentResponseModel) -> AssessmentResponse:
        return AssessmentResponse(
            id=model.id,
            instance_id=model.instance_id,
            answers=tuple(Answer.from_dict(item) for item in model.answers),
            total_score=model.total_score,
            severity_label=model.severity_label,
            completed_at=model.completed_at,
        )

    def _to_model(self, entity: AssessmentResponse) -> AssessmentResponseModel:
        return AssessmentResponseModel(
            id=entity.id,
            instance_id=entity.instance_id,
            answers=[answer.to_dict() for answer in entity.answers],
            total_score=entity.total_score,
            severity_label=entity.severity_label,
            completed_at=entity.completed_at,
            created_at=entity.completed_at,
        )
