"""SQLAlchemy implementation of the measure repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from mbc_tracker.core.interfaces.repositories.measure_repository_interface import (
    IMeasureRepository,
)
from mbc_tracker.domain.entities.measure import Measure, QuestionDefinition, SeverityBand
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.measure import MeasureModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.base_repository import (
    BaseSQLAlchemyRepository,
)


class SQLAlchemyMeasureRepository(
    BaseSQLAlchemyRepository[Measure, MeasureModel], IMeasureRepository
):
    model_class = MeasureModel

    async def get_by_id(self, measure_id: UUID) -> Measure | None:
        return await super().get_by_id(measure_id)

    async def get_by_name(self, name: str) -> Measure | None:
        try:
            result = await self._session.execute(
                select(MeasureModel).where(MeasureModel.name == name)
            )
            model = result.scalars().first()
            return self._to_entity(model) if model else None
        except SQLAlchemyError as e:
            raise self._error("get_by_name", e) from e

    async def list_all(self) -> list[Measure]:
        try:
            result = await self._session.execute(select(MeasureModel).order_by(MeasureModel.name))
            return [self._to_entity(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._error("list_all", e) from e

    async def upsert(self, measure: Measure) -> Measure:
        existing = await self.get_by_name(measure.name)
        if existing is not None:
            return existing
        return await self._add(measure)

    def _to_entity(self, model: MeasureModel) -> Measure:
        return Measure(
            id=model.id,
            name=model.name,
            full_name=model.full_name,
            description=model.description,
            instructions=model.instructions,
            questions=[
                QuestionDefinition(
                    number=q["number"],
                    text=q["text"],
                    min_value=q.get("min_value", 0),
                    max_value=q.get("max_value", 3),
                )
                for q in model.questions
            ],
            severity_bands=[
                SeverityBand(label=b["label"], min_score=b["min_score"], max_score=b["max_score"])
                for b in model.severity_bands
            ],
        )

    def _to_model(self, entity: Measure) -> MeasureModel:
        return MeasureModel(
            id=entity.id,
            name=entity.name,
            full_name=entity.full_name,
            description=entity.description,
            instructions=entity.instructions,
            min_score=entity.min_score,
            max_score=entity.max_score,
            questions=[
                {
                    "number": q.number,
                    "text": q.text,
                    "min_value": q.min_value,
                    "max_value": q.max_value,
                }
                for q in entity.questions
            ],
            severity_bands=[
                {"label": b.label, "min_score": b.min_score, "max_score": b.max_score}
                for b in entity.severity_bands
            ],
        )
