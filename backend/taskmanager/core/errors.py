"""Domain errors and their translation to HTTP responses."""

from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class TaskManagerError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "ServerError"
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(TaskManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "ValidationError"
    default_detail = "Invalid request"


class Unauthorized(TaskManagerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    default_detail = "Unauthorized"


class NotFound(TaskManagerError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"
    default_detail = "Resource not found"


class EmailAlreadyExists(TaskManagerError):
    status_code = status.HTTP_409_CONFLICT
    error = "EmailAlreadyExists"
    default_detail = "Email already registered"


class InvalidCredentials(TaskManagerError):
    """Raised for unknown emails and wrong passwords alike."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "InvalidCredentials"
    default_detail = "Incorrect email or password"


class InvalidOrExpiredResetToken(TaskManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "InvalidOrExpiredResetToken"
    default_detail = "Password reset token is invalid or has expired"


def _error_body(error: str, detail: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error, "detail": detail}
    body.update(extra)
    return body


async def _handle_domain_error(_: Request, exc: Exception) -> JSONResponse:
    domain_error = cast(TaskManagerError, exc)
    headers = None
    if domain_error.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=domain_error.status_code,
        content=_error_body(domain_error.error, domain_error.detail),
        headers=headers,
    )


async def _handle_request_validation(_: Request, exc: Exception) -> JSONResponse:
    errors = cast(RequestValidationError, exc).errors()
    details = jsonable_encoder(errors, exclude={"ctx", "input", "url"})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("ValidationError", "Invalid request", details=details),
    )


_HTTP_ERROR_NAMES = {
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "NotFound",
    status.HTTP_405_METHOD_NOT_ALLOWED: "MethodNotAllowed",
    status.HTTP_429_TOO_MANY_REQUESTS: "TooManyRequests",
}


async def _handle_http_error(_: Request, exc: Exception) -> JSONResponse:
    """Framework errors such as unknown routes or rate limiting."""
    http_error = cast(StarletteHTTPException, exc)
    error = _HTTP_ERROR_NAMES.get(http_error.status_code, "HTTPError")
    return JSONResponse(
        status_code=http_error.status_code,
        content=_error_body(error, str(http_error.detail)),
        headers=http_error.headers,
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("ServerError", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the single translation point from errors to responses."""
    app.add_exception_handler(TaskManagerError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(Exception, _handle_unexpected)


__all__ = [
    "EmailAlreadyExists",
    "InvalidCredentials",
    "InvalidOrExpiredResetToken",
    "NotFound",
    "TaskManagerError",
    "Unauthorized",
    "ValidationError",
    "register_exception_handlers",
]
