from mbc_tracker.infrastructure.persistence.sqlalchemy.unit_of_work.async_unit_of_work import (
    AsyncSQLAlchemyUnitOfWork,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.unit_of_work.unit_of_work_factory import (
    UnitOfWorkFactory,
)

__all__ = ["AsyncSQLAlchemyUnitOfWork", "UnitOfWorkFactory"]
