"""
SQLAlchemy implementation of the policy repository.

``get_or_create`` is the only implicit write in the system. It issues a
dialect-level ``INSERT ... ON CONFLICT DO NOTHING`` and then re-selects, so
concurrent first-access callers all read back the same row.
"""

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mbc_tracker.core.interfaces.repositories.policy_repository_interface import IPolicyRepository
from mbc_tracker.core.utils.logging import get_logger
from mbc_tracker.domain.entities.policy import Policy
from mbc_tracker.domain.exceptions import RepositoryError
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.policy import PolicyModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.base_repository import (
    BaseSQLAlchemyRepository,
)

logger = get_logger(__name__)

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


class SQLAlchemyPolicyRepository(BaseSQLAlchemyRepository[Policy, PolicyModel], IPolicyRepository):
    model_class = PolicyModel

    async def get_by_name(self, name: str) -> Policy | None:
        try:
            result = await self._session.execute(
                select(PolicyModel).where(PolicyModel.name == name)
            )
            model = result.scalars().first()
            return self._to_entity(model) if model else None
        except SQLAlchemyError as e:
            raise self._error("get_by_name", e) from e

    async def get_or_create(self, default: Policy) -> Policy:
        existing = await self.get_by_name(default.name)
        if existing is not None:
            return existing

        values = {
            "id": default.id,
            "name": default.name,
            "cadence_days": default.cadence_days,
            "grace_window_days": default.grace_window_days,
            "expiration_days": default.expiration_days,
            "measures_required": list(default.measures_required),
            "require_at_intake": default.require_at_intake,
            "created_at": default.created_at,
            "updated_at": default.updated_at,
        }

        insert_fn = _UPSERT_INSERTS.get(self.dialect_name)
        try:
            if insert_fn is not None:
                stmt = insert_fn(PolicyModel).values(**values).on_conflict_do_nothing(
                    index_elements=[PolicyModel.name]
                )
                await self._session.execute(stmt)
            else:
                # Generic dialects: insert inside a savepoint and tolerate the conflict
                try:
                    async with self._session.begin_nested():
                        self._session.add(PolicyModel(**values))
                except IntegrityError:
                    logger.info("Policy '%s' was created concurrently", default.name)
        except SQLAlchemyError as e:
            raise self._error("get_or_create", e) from e

        policy = await self.get_by_name(default.name)
        if policy is None:
            raise RepositoryError(
                f"Policy '{default.name}' missing after get-or-create",
                repository=type(self).__name__,
                operation="get_or_create",
            )
        if policy.id == default.id:
            logger.info("Created default policy '%s'", policy.name)
        return policy

    def _to_entity(self, model: PolicyModel) -> Policy:
        return Policy(
            id=model.id,
            name=model.name,
            cadence_days=model.cadence_days,
            grace_window_days=model.grace_window_days,
            expiration_days=model.expiration_days,
            measures_required=list(model.measures_required or []),
            require_at_intake=model.require_at_intake,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Policy) -> PolicyModel:
        return PolicyModel(
            id=entity.id,
            name=entity.name,
            cadence_days=entity.cadence_days,
            grace_window_days=entity.grace_window_days,
            expiration_days=entity.expiration_days,
            measures_required=list(entity.measures_required),
            require_at_intake=entity.require_at_intake,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
