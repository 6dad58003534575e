"""
Assessment instance administration endpoints.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends

from mbc_tracker.application.services import NotificationDispatcher
from mbc_tracker.presentation.api.dependencies import LifecycleDep, get_notification_dispatcher
from mbc_tracker.presentation.api.v1.schemas.instances import (
    CancelInstanceRequest,
    InstanceResponse,
    SendResultResponse,
)

router = APIRouter()


@router.post("/{instance_id}/cancel", response_model=InstanceResponse)
async def cancel_instance(
    instance_id: UUID,
    lifecycle: LifecycleDep,
    payload: Annotated[CancelInstanceRequest | None, Body()] = None,
) -> InstanceResponse:
    payload = payload or CancelInstanceRequest()
    instance = await lifecycle.cancel(instance_id, actor_id=payload.actor_id, reason=payload.reason)
    return InstanceResponse.from_entity(instance)


@router.post("/{instance_id}/send", response_model=SendResultResponse)
async def send_instance_link(
    instance_id: UUID,
    dispatcher: Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)],
) -> SendResultResponse:
    """Send (or re-send) the magic link for one assessment."""
    result = await dispatcher.dispatch(instance_id)
    return SendResultResponse(success=result.success, message_id=result.message_id, error=result.error)
