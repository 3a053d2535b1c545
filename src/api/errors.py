# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Translation of service errors into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.exceptions import (
    AccessControlError,
    ConflictError,
    InvalidRequestError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDenied,
    StorageFailure,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[AccessControlError], int] = {
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: AccessControlError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def access_control_error_handler(
    request: Request, exc: AccessControlError
) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=code,
        content={
            "detail": exc.message,
            "error": type(exc).__name__,
            "retryable": exc.retryable,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccessControlError, access_control_error_handler)
