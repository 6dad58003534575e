"""
Shared test fixtures.

Every test that touches the database gets its own file-backed SQLite
database under ``tmp_path`` with the schema created from the models, so
tests are isolated and concurrent sessions behave as they do in production.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from mbc_tracker.application.services import (
    AuditLogService,
    ComplianceAggregator,
    InstanceGenerator,
    LifecycleManager,
    seed_measures,
)
from mbc_tracker.core.config.settings import Settings
from mbc_tracker.domain.entities.assessment_response import Answer
from mbc_tracker.domain.entities.patient import Patient
from mbc_tracker.domain.entities.policy import Policy
from mbc_tracker.domain.services.scoring import MeasureScorer
from mbc_tracker.infrastructure.persistence.sqlalchemy.session import (
    create_all_tables,
    create_engine_from_settings,
    create_session_factory,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.unit_of_work import UnitOfWorkFactory

T0 = datetime(2024, 6, 3, 9, 0, tzinfo=UTC)


class FrozenClock:
    """Controllable clock: returns ``now`` until advanced."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        TESTING=True,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'mbc_test.db'}",
        AUDIT_LOG_FILE=None,
        SQLITE_BUSY_TIMEOUT_SECONDS=30.0,
        PUBLIC_APP_URL="https://mbc.example.test/",
    )


@pytest.fixture
def policy() -> Policy:
    return Policy(
        name="default",
        cadence_days=14,
        grace_window_days=3,
        expiration_days=7,
        measures_required=["PHQ-9", "GAD-7"],
        require_at_intake=True,
    )


@pytest.fixture
def scorer() -> MeasureScorer:
    return MeasureScorer()


@pytest_asyncio.fixture
async def engine(test_settings) -> AsyncGenerator[AsyncEngine, None]:
    db_engine = create_engine_from_settings(test_settings)
    await create_all_tables(db_engine)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory) -> UnitOfWorkFactory:
    return UnitOfWorkFactory(session_factory)


@pytest_asyncio.fixture
async def seeded(uow_factory, scorer):
    """Measure catalog persisted; returns the stored measures keyed by name."""
    measures = await seed_measures(uow_factory, scorer)
    return {measure.name: measure for measure in measures}


@pytest.fixture
def audit_logger(uow_factory, clock) -> AuditLogService:
    return AuditLogService(uow_factory, clock=clock)


@pytest.fixture
def generator(uow_factory, policy, scorer, audit_logger, clock) -> InstanceGenerator:
    return InstanceGenerator(uow_factory, policy, scorer, audit_logger, clock=clock)


@pytest.fixture
def lifecycle(uow_factory, scorer, audit_logger, clock) -> LifecycleManager:
    return LifecycleManager(uow_factory, scorer, audit_logger, clock=clock)


@pytest.fixture
def aggregator(uow_factory, policy, clock) -> ComplianceAggregator:
    return ComplianceAggregator(uow_factory, policy, clock=clock)


@pytest_asyncio.fixture
async def patient(uow_factory, seeded) -> Patient:
    record = Patient(first_name="Avery", last_name="Quinn", email="avery.quinn@example.test")
    async with uow_factory() as uow:
        await uow.patients.create(record)
    return record


def answers_for(values: list[int]) -> list[Answer]:
    """Answers for questions 1..n with the given values."""
    return [Answer(question_num=i, value=v) for i, v in enumerate(values, start=1)]
