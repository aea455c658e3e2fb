"""HTTP-facing exceptions and exception handlers.

Domain errors raised by the content and auth services are translated here
into a single error envelope:
- ``AppException`` subclasses carry status code, error code and message
- Domain exceptions (not found, no changes, could not save, locked out)
  are mapped onto the same envelope
- Unexpected exceptions are logged and reported as a generic 500
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio.content.exceptions import (
    ContentNotFoundError,
    ContentSaveError,
    ContentStoreError,
    NoChangesError,
)
from portfolio.observability.logging import get_logger
from portfolio.services.auth.exceptions import LoginRateLimitedError


if TYPE_CHECKING:
    from fastapi import Request

logger = get_logger(__name__)


class ErrorDetail(BaseModel):
    """Structured error detail for validation errors."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    """Structured error response."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None
    retry_after: int | None = None


class AppException(Exception):
    """Base application exception rendered as an ``ErrorResponse``."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: list[ErrorDetail] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details
        self.headers = headers
        super().__init__(message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str, identifier: Any) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="NOT_FOUND",
            message=f"{resource} with identifier '{identifier}' not found",
        )


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Could not validate credentials") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="UNAUTHORIZED",
            message=message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="FORBIDDEN",
            message=message,
        )


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="BAD_REQUEST",
            message=message,
        )


class RateLimitException(AppException):
    """Too many attempts; carries the remaining lockout in ``Retry-After``."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: int | None = None,
    ) -> None:
        headers = {"Retry-After": str(retry_after)} if retry_after else None
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error="RATE_LIMIT_EXCEEDED",
            message=message,
            headers=headers,
        )
        self.retry_after = retry_after


class ServiceUnavailableException(AppException):
    """Service unavailable exception."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error="SERVICE_UNAVAILABLE",
            message=message,
        )


def _render(
    status_code: int,
    body: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        _request: Request,
        exc: AppException,
    ) -> ORJSONResponse:
        return _render(
            exc.status_code,
            ErrorResponse(
                error=exc.error,
                message=exc.message,
                details=exc.details,
                retry_after=getattr(exc, "retry_after", None),
            ),
            exc.headers,
        )

    @app.exception_handler(ContentNotFoundError)
    async def content_not_found_handler(
        _request: Request,
        exc: ContentNotFoundError,
    ) -> ORJSONResponse:
        return _render(
            status.HTTP_404_NOT_FOUND,
            ErrorResponse(error="NOT_FOUND", message=str(exc)),
        )

    @app.exception_handler(NoChangesError)
    async def no_changes_handler(
        _request: Request,
        exc: NoChangesError,
    ) -> ORJSONResponse:
        return _render(
            status.HTTP_400_BAD_REQUEST,
            ErrorResponse(error="BAD_REQUEST", message=str(exc)),
        )

    @app.exception_handler(ContentSaveError)
    async def content_save_error_handler(
        _request: Request,
        exc: ContentSaveError,
    ) -> ORJSONResponse:
        logger.error("Content save failed", error=str(exc))
        return _render(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(error="SAVE_FAILED", message="Could not save content"),
        )

    @app.exception_handler(ContentStoreError)
    async def content_store_error_handler(
        _request: Request,
        exc: ContentStoreError,
    ) -> ORJSONResponse:
        logger.error("Content store unavailable", error=str(exc))
        return _render(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            ErrorResponse(
                error="SERVICE_UNAVAILABLE",
                message="Content store temporarily unavailable",
            ),
        )

    @app.exception_handler(LoginRateLimitedError)
    async def login_rate_limited_handler(
        _request: Request,
        exc: LoginRateLimitedError,
    ) -> ORJSONResponse:
        headers = None
        if exc.retry_after_seconds:
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return _render(
            status.HTTP_429_TOO_MANY_REQUESTS,
            ErrorResponse(
                error="RATE_LIMIT_EXCEEDED",
                message=str(exc),
                retry_after=exc.retry_after_seconds,
            ),
            headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        return _render(
            exc.status_code,
            ErrorResponse(error="HTTP_ERROR", message=str(exc.detail)),
            getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        details = [
            ErrorDetail(
                code="VALIDATION_ERROR",
                message=error["msg"],
                field=".".join(str(loc) for loc in error["loc"]),
            )
            for error in exc.errors()
        ]
        return _render(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorResponse(
                error="VALIDATION_ERROR",
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        _request: Request,
        exc: Exception,
    ) -> ORJSONResponse:
        logger.opt(exception=exc).error("Unhandled exception")
        return _render(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(
                error="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred",
            ),
        )
