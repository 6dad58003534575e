"""
FastAPI dependency providers.

Infrastructure objects (unit of work factory, notification sender, scorer,
clock) live on ``app.state`` and are created in the application lifespan;
tests replace them there. Services are built per request around the policy
resolved for that request.
"""

import logging
import secrets
from typing import Annotated

from fastapi import Depends, Header, Request

from mbc_tracker.application.services import (
    AuditLogService,
    ComplianceAggregator,
    EnrollmentService,
    InstanceGenerator,
    LifecycleManager,
    NotificationDispatcher,
    PolicyStore,
    ProgressService,
)
from mbc_tracker.core.config.settings import Settings, get_settings
from mbc_tracker.core.interfaces.services.notification_interface import INotificationSender
from mbc_tracker.core.interfaces.services.scorer_interface import IScorer
from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, utcnow
from mbc_tracker.domain.entities.policy import Policy
from mbc_tracker.presentation.api.exception_handlers import UnauthorizedTriggerError

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_uow_factory(request: Request) -> UnitOfWorkFactory:
    uow_factory = getattr(request.app.state, "uow_factory", None)
    if uow_factory is None:
        raise RuntimeError("Database is not initialized; the application lifespan has not run")
    return uow_factory


def get_clock(request: Request) -> Clock:
    return getattr(request.app.state, "clock", None) or utcnow


def get_scorer(request: Request) -> IScorer:
    return request.app.state.scorer


def get_notification_sender(request: Request) -> INotificationSender:
    return request.app.state.notification_sender


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
UowFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]
ClockDep = Annotated[Clock, Depends(get_clock)]
ScorerDep = Annotated[IScorer, Depends(get_scorer)]


def get_audit_logger(uow_factory: UowFactoryDep, clock: ClockDep) -> AuditLogService:
    return AuditLogService(uow_factory, clock=clock)


AuditDep = Annotated[AuditLogService, Depends(get_audit_logger)]


async def get_active_policy(uow_factory: UowFactoryDep, settings: SettingsDep) -> Policy:
    """Resolve the active policy once per request."""
    return await PolicyStore(uow_factory, settings).get_active_policy()


PolicyDep = Annotated[Policy, Depends(get_active_policy)]


def get_lifecycle_manager(
    uow_factory: UowFactoryDep, scorer: ScorerDep, audit: AuditDep, clock: ClockDep
) -> LifecycleManager:
    return LifecycleManager(uow_factory, scorer, audit, clock=clock)


LifecycleDep = Annotated[LifecycleManager, Depends(get_lifecycle_manager)]


def get_instance_generator(
    uow_factory: UowFactoryDep,
    policy: PolicyDep,
    scorer: ScorerDep,
    audit: AuditDep,
    clock: ClockDep,
) -> InstanceGenerator:
    return InstanceGenerator(uow_factory, policy, scorer, audit, clock=clock)


GeneratorDep = Annotated[InstanceGenerator, Depends(get_instance_generator)]


def get_compliance_aggregator(
    uow_factory: UowFactoryDep, policy: PolicyDep, clock: ClockDep
) -> ComplianceAggregator:
    return ComplianceAggregator(uow_factory, policy, clock=clock)


def get_notification_dispatcher(
    request: Request,
    uow_factory: UowFactoryDep,
    lifecycle: LifecycleDep,
    settings: SettingsDep,
    clock: ClockDep,
) -> NotificationDispatcher:
    return NotificationDispatcher(
        uow_factory,
        lifecycle,
        get_notification_sender(request),
        base_url=settings.PUBLIC_APP_URL,
        lookahead_hours=settings.NOTIFICATION_LOOKAHEAD_HOURS,
        clock=clock,
    )


def get_enrollment_service(
    uow_factory: UowFactoryDep, generator: GeneratorDep, audit: AuditDep, clock: ClockDep
) -> EnrollmentService:
    return EnrollmentService(uow_factory, generator, audit, clock=clock)


def get_progress_service(
    uow_factory: UowFactoryDep, audit: AuditDep, clock: ClockDep
) -> ProgressService:
    return ProgressService(uow_factory, audit, clock=clock)


def verify_cron_secret(
    settings: SettingsDep,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Trigger endpoints require ``Authorization: Bearer <CRON_SECRET>`` when one is configured."""
    if not settings.CRON_SECRET:
        return
    expected = f"Bearer {settings.CRON_SECRET}"
    if authorization is None or not secrets.compare_digest(authorization, expected):
        logger.warning("Rejected trigger call with missing or invalid bearer token")
        raise UnauthorizedTriggerError()


def get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")
