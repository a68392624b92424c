"""Map Capsule exceptions onto HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from capsule.errors import (
    AlreadyMemberError,
    AlreadyResolvedError,
    CannotRemoveOwnerError,
    CapsuleError,
    InvalidRoleError,
    InvalidTransitionError,
    InviteExpiredError,
    NotFoundError,
    PermissionDeniedError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyMemberError: status.HTTP_409_CONFLICT,
    AlreadyResolvedError: status.HTTP_409_CONFLICT,
    CannotRemoveOwnerError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    InviteExpiredError: status.HTTP_410_GONE,
    InvalidRoleError: 422,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: CapsuleError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_400_BAD_REQUEST


async def capsule_error_handler(request: Request, exc: CapsuleError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"error": exc.code, "message": exc.message, "details": exc.details},
    )


async def store_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return await capsule_error_handler(request, StoreUnavailableError(request.url.path, exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CapsuleError, capsule_error_handler)
    app.add_exception_handler(OperationalError, store_error_handler)
