"""
Fixtures for API tests.

ASGITransport does not run the application lifespan, so the app is built
around the test database's unit of work factory and the measure catalog is
seeded by the ``seeded`` fixture.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from mbc_tracker.app_factory import create_application
from mbc_tracker.infrastructure.notifications import LoggingNotificationSender


@pytest.fixture
def sender() -> LoggingNotificationSender:
    return LoggingNotificationSender()


@pytest.fixture
def app_settings(test_settings):
    return test_settings


@pytest.fixture
def app(app_settings, uow_factory, sender, clock, seeded) -> FastAPI:
    return create_application(
        settings_override=app_settings,
        uow_factory=uow_factory,
        notification_sender=sender,
        clock=clock,
    )


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client


@pytest.fixture
def api(app_settings) -> str:
    return app_settings.API_V1_STR
