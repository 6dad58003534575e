"""
Exception handlers for the FastAPI application.

Maps the domain error taxonomy onto HTTP responses. Validation and state
errors keep their message so the client can tell "already completed" from
"link expired" from "not found"; anything unexpected is masked.
"""

import logging
import traceback
import uuid
from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse, Response
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_410_GONE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from mbc_tracker.core.utils.logging import sanitize_text
from mbc_tracker.domain.exceptions import (
    BaseApplicationError,
    EntityNotFoundError,
    InstanceAlreadyCompletedError,
    InstanceCancelledError,
    InstanceExpiredError,
    InvalidInstanceStateError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

ExceptionHandler = Callable[[Request, Exception], Awaitable[Response]]


class UnauthorizedTriggerError(BaseApplicationError):
    """A trigger endpoint was called without the configured bearer secret."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


def _error_code(exc: Exception) -> str:
    if isinstance(exc, InstanceAlreadyCompletedError):
        return "already_completed"
    if isinstance(exc, InstanceCancelledError):
        return "cancelled"
    if isinstance(exc, InstanceExpiredError):
        return "expired"
    if isinstance(exc, InvalidInstanceStateError):
        return "invalid_state"
    if isinstance(exc, EntityNotFoundError):
        return "not_found"
    if isinstance(exc, ValidationFailedError):
        return "validation_failed"
    return "error"


def _error_response(status_code: int, exc: BaseApplicationError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": _error_code(exc)},
    )


async def not_found_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    return _error_response(HTTP_404_NOT_FOUND, exc)


async def invalid_state_handler(request: Request, exc: InvalidInstanceStateError) -> JSONResponse:
    status_code = HTTP_410_GONE if isinstance(exc, InstanceExpiredError) else HTTP_409_CONFLICT
    return _error_response(status_code, exc)


async def validation_failed_handler(request: Request, exc: ValidationFailedError) -> JSONResponse:
    return _error_response(HTTP_400_BAD_REQUEST, exc)


async def unauthorized_handler(request: Request, exc: UnauthorizedTriggerError) -> JSONResponse:
    return _error_response(HTTP_401_UNAUTHORIZED, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure with a correlation id and return a masked body."""
    error_id = str(uuid.uuid4())
    logger.error(
        f"Unhandled exception {error_id} on {request.method} {request.url.path}: "
        f"{type(exc).__name__}: {sanitize_text(str(exc))}"
    )
    logger.debug(traceback.format_exc())
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal server error occurred.", "error_id": error_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the domain error handlers with the application.

    Args:
        app: FastAPI application instance
    """
    handlers: list[tuple[type[Exception], object]] = [
        (EntityNotFoundError, not_found_handler),
        (InvalidInstanceStateError, invalid_state_handler),
        (ValidationFailedError, validation_failed_handler),
        (UnauthorizedTriggerError, unauthorized_handler),
        (Exception, unhandled_exception_handler),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))
    logger.debug("Exception handlers registered")
