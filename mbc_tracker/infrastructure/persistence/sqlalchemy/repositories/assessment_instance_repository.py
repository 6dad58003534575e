"""
SQLAlchemy implementation of the assessment instance repository.

State changes are expressed as conditional UPDATE statements guarded by the
expected prior status (and, for patient-facing transitions, by the expiry
time). The database decides the winner of concurrent transitions; callers
inspect the affected row count instead of trusting what they read earlier.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mbc_tracker.core.interfaces.repositories.assessment_instance_repository_interface import (
    IAssessmentInstanceRepository,
)
from mbc_tracker.core.utils.logging import get_logger
from mbc_tracker.domain.entities.assessment_instance import (
    NON_TERMINAL_STATUSES,
    AssessmentInstance,
    InstanceStatus,
)
from mbc_tracker.domain.exceptions import AlreadyScheduledError, RepositoryError
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.assessment_instance import (
    AssessmentInstanceModel,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.base_repository import (
    BaseSQLAlchemyRepository,
)

logger = get_logger(__name__)

_TIMESTAMP_COLUMNS = frozenset({"sent_at", "started_at", "completed_at"})
_NON_TERMINAL_VALUES = sorted(status.value for status in NON_TERMINAL_STATUSES)


class SQLAlchemyAssessmentInstanceRepository(
    BaseSQLAlchemyRepository[AssessmentInstance, AssessmentInstanceModel],
    IAssessmentInstanceRepository,
):
    model_class = AssessmentInstanceModel

    async def add(self, instance: AssessmentInstance) -> AssessmentInstance:
        model = self._to_model(instance)
        try:
            # Savepoint so a uniqueness conflict does not poison the outer transaction
            async with self._session.begin_nested():
                self._session.add(model)
                await self._session.flush()
        except IntegrityError as e:
            if await self.exists_for(instance.patient_id, instance.measure_id, instance.encounter_id):
                raise AlreadyScheduledError(
                    patient_id=str(instance.patient_id),
                    measure_name=instance.measure_name or str(instance.measure_id),
                    encounter_id=str(instance.encounter_id) if instance.encounter_id else None,
                ) from e
            raise self._error("add", e) from e
        except SQLAlchemyError as e:
            raise self._error("add", e) from e
        return instance

    async def exists_for(
        self, patient_id: UUID, measure_id: UUID, encounter_id: UUID | None
    ) -> bool:
        conditions = [
            AssessmentInstanceModel.patient_id == patient_id,
            AssessmentInstanceModel.measure_id == measure_id,
        ]
        if encounter_id is None:
            conditions.append(AssessmentInstanceModel.encounter_id.is_(None))
        else:
            conditions.append(AssessmentInstanceModel.encounter_id == encounter_id)
        try:
            result = await self._session.execute(
                select(func.count()).select_from(AssessmentInstanceModel).where(*conditions)
            )
            return (result.scalar_one() or 0) > 0
        except SQLAlchemyError as e:
            raise self._error("exists_for", e) from e

    async def get_by_id(self, instance_id: UUID) -> AssessmentInstance | None:
        return await self._get_one(AssessmentInstanceModel.id == instance_id, "get_by_id")

    async def get_by_token(self, token: str) -> AssessmentInstance | None:
        return await self._get_one(AssessmentInstanceModel.token == token, "get_by_token")

    async def transition(
        self,
        instance_id: UUID,
        from_statuses: Iterable[InstanceStatus],
        to_status: InstanceStatus,
        now: datetime,
        require_unexpired: bool = True,
        **timestamps: Any,
    ) -> bool:
        unknown = set(timestamps) - _TIMESTAMP_COLUMNS
        if unknown:
            raise RepositoryError(
                f"Unsupported transition columns: {sorted(unknown)}",
                repository=type(self).__name__,
                operation="transition",
            )

        stmt = (
            update(AssessmentInstanceModel)
            .where(
                AssessmentInstanceModel.id == instance_id,
                AssessmentInstanceModel.status.in_([status.value for status in from_statuses]),
            )
            .values(status=to_status.value, **timestamps)
            .execution_options(synchronize_session=False)
        )
        if require_unexpired:
            stmt = stmt.where(AssessmentInstanceModel.expires_at > now)

        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._error("transition", e) from e
        return result.rowcount == 1

    async def expire_overdue(self, now: datetime) -> list[UUID]:
        stmt = (
            update(AssessmentInstanceModel)
            .where(
                AssessmentInstanceModel.status.in_(_NON_TERMINAL_VALUES),
                AssessmentInstanceModel.expires_at < now,
            )
            .values(status=InstanceStatus.EXPIRED.value)
            .returning(AssessmentInstanceModel.id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._error("expire_overdue", e) from e

    async def list_due(self, now: datetime, grace_window_days: int) -> list[AssessmentInstance]:
        grace_start = now - timedelta(days=grace_window_days)
        return await self._list(
            "list_due",
            AssessmentInstanceModel.status.in_(_NON_TERMINAL_VALUES),
            AssessmentInstanceModel.due_date <= now,
            AssessmentInstanceModel.due_date >= grace_start,
        )

    async def list_overdue(self, now: datetime, grace_window_days: int) -> list[AssessmentInstance]:
        grace_start = now - timedelta(days=grace_window_days)
        return await self._list(
            "list_overdue",
            AssessmentInstanceModel.status.in_(_NON_TERMINAL_VALUES),
            AssessmentInstanceModel.due_date < grace_start,
            AssessmentInstanceModel.expires_at > now,
        )

    async def count_due_between(self, start: datetime, end: datetime) -> int:
        return await self._count(
            "count_due_between",
            AssessmentInstanceModel.due_date >= start,
            AssessmentInstanceModel.due_date <= end,
            AssessmentInstanceModel.status != InstanceStatus.CANCELLED.value,
        )

    async def count_completed_between(self, start: datetime, end: datetime) -> int:
        return await self._count(
            "count_completed_between",
            AssessmentInstanceModel.status == InstanceStatus.COMPLETED.value,
            AssessmentInstanceModel.due_date >= start,
            AssessmentInstanceModel.due_date <= end,
        )

    async def list_pending_due_before(
        self, until: datetime, now: datetime
    ) -> list[AssessmentInstance]:
        return await self._list(
            "list_pending_due_before",
            AssessmentInstanceModel.status == InstanceStatus.PENDING.value,
            AssessmentInstanceModel.due_date <= until,
            AssessmentInstanceModel.expires_at > now,
        )

    async def list_for_patient(
        self,
        patient_id: UUID,
        statuses: Iterable[InstanceStatus] | None = None,
    ) -> list[AssessmentInstance]:
        conditions = [AssessmentInstanceModel.patient_id == patient_id]
        if statuses is not None:
            conditions.append(
                AssessmentInstanceModel.status.in_([status.value for status in statuses])
            )
        return await self._list("list_for_patient", *conditions)

    async def list_for_encounter(self, encounter_id: UUID) -> list[AssessmentInstance]:
        return await self._list(
            "list_for_encounter", AssessmentInstanceModel.encounter_id == encounter_id
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_one(self, condition: Any, operation: str) -> AssessmentInstance | None:
        query = (
            select(AssessmentInstanceModel)
            .where(condition)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(query)
            model = result.scalars().first()
            return self._to_entity(model) if model else None
        except SQLAlchemyError as e:
            raise self._error(operation, e) from e

    async def _list(self, operation: str, *conditions: Any) -> list[AssessmentInstance]:
        query = (
            select(AssessmentInstanceModel)
            .where(*conditions)
            .order_by(AssessmentInstanceModel.due_date, AssessmentInstanceModel.id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(query)
            return [self._to_entity(model) for model in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._error(operation, e) from e

    async def _count(self, operation: str, *conditions: Any) -> int:
        query = select(func.count()).select_from(AssessmentInstanceModel).where(*conditions)
        try:
            result = await self._session.execute(query)
            return int(result.scalar_one() or 0)
        except SQLAlchemyError as e:
            raise self._error(operation, e) from e

    def _to_entity(self, model: AssessmentInstanceModel) -> AssessmentInstance:
        return AssessmentInstance(
            id=model.id,
            token=model.token,
            patient_id=model.patient_id,
            measure_id=model.measure_id,
            encounter_id=model.encounter_id,
            due_date=model.due_date,
            expires_at=model.expires_at,
            status=InstanceStatus(model.status),
            sent_at=model.sent_at,
            started_at=model.started_at,
            completed_at=model.completed_at,
            created_at=model.created_at,
            measure_name=model.measure.name if model.measure is not None else None,
        )

    def _to_model(self, entity: AssessmentInstance) -> AssessmentInstanceModel:
        return AssessmentInstanceModel(
            id=entity.id,
            token=entity.token,
            patient_id=entity.patient_id,
            measure_id=entity.measure_id,
            encounter_id=entity.encounter_id,
            due_date=entity.due_date,
            expires_at=entity.expires_at,
            status=entity.status.value,
            sent_at=entity.sent_at,
            started_at=entity.started_at,
            completed_at=entity.completed_at,
            created_at=entity.created_at,
        )
