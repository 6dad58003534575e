"""
Trigger surface for scheduled jobs.

These endpoints are meant to be called by an external scheduler (cron or a
platform cron service). Every operation is idempotent, so overlapping or
repeated calls are harmless.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from mbc_tracker.application.services import NotificationDispatcher
from mbc_tracker.core.utils.date_utils import format_date_iso
from mbc_tracker.presentation.api.dependencies import (
    ClockDep,
    GeneratorDep,
    LifecycleDep,
    SettingsDep,
    get_notification_dispatcher,
    verify_cron_secret,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_cron_secret)])


@router.post(
    "/generate-instances",
    summary="Generate instances for upcoming encounters",
    description="Creates assessments for encounters in the next N days, then sweeps expired links.",
)
async def generate_instances(
    generator: GeneratorDep,
    lifecycle: LifecycleDep,
    settings: SettingsDep,
    clock: ClockDep,
    days_ahead: Annotated[int | None, Query(ge=0, le=90)] = None,
) -> dict[str, Any]:
    days = days_ahead if days_ahead is not None else settings.UPCOMING_DAYS_AHEAD
    generated = await generator.generate_upcoming(days)
    expired = await lifecycle.mark_expired_instances()
    return {
        "success": True,
        "days_ahead": days,
        "generated": generated.to_dict(),
        "expired": expired,
        "timestamp": format_date_iso(clock()),
    }


@router.post("/expire-instances", summary="Sweep expired assessment links")
async def expire_instances(lifecycle: LifecycleDep, clock: ClockDep) -> dict[str, Any]:
    expired = await lifecycle.mark_expired_instances()
    return {"success": True, "expired": expired, "timestamp": format_date_iso(clock())}


@router.post("/send-notifications", summary="Send links for assessments coming due")
async def send_notifications(
    dispatcher: Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)],
    clock: ClockDep,
) -> dict[str, Any]:
    summary = await dispatcher.send_pending_notifications()
    return {"success": True, **summary, "timestamp": format_date_iso(clock())}

