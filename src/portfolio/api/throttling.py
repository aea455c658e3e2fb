"""Request throttling using SlowAPI with Redis backend.

This module provides:
- The shared ``Limiter`` (fixed window, default limit from settings)
- A key function based on the resolved client address
- The 429 handler rendering the common error envelope
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from portfolio.core.config import get_settings
from portfolio.core.exceptions import ErrorResponse
from portfolio.observability.logging import get_logger
from portfolio.services.auth.service import resolve_client_address


if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

logger = get_logger(__name__)


def client_address(request: Request) -> str:
    """Rate limit key: the caller address, honouring proxy headers."""
    return resolve_client_address(
        request.headers.get("x-forwarded-for"),
        request.headers.get("x-real-ip"),
        request.client.host if request.client else None,
    )


def create_limiter() -> Limiter:
    """Create and configure the request limiter."""
    settings = get_settings()

    return Limiter(
        key_func=client_address,
        default_limits=[settings.rate_limiting.default],
        storage_uri=settings.redis_rate_limit_url,
        strategy="fixed-window",
        headers_enabled=True,
        enabled=settings.rate_limiting.enabled,
        key_prefix=f"{settings.cache.prefix}:throttle",
    )


# Global limiter instance
limiter = create_limiter()


async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> ORJSONResponse:
    """Render slowapi's ``RateLimitExceeded`` as a 429 error envelope."""
    logger.warning(
        "Request rate limit exceeded",
        path=request.url.path,
        method=request.method,
        client_ip=client_address(request),
        limit=str(exc.detail),
    )
    body = ErrorResponse(
        error="RATE_LIMIT_EXCEEDED",
        message="Too many requests. Please try again later.",
    )
    response = ORJSONResponse(
        status_code=429,
        content=body.model_dump(exclude_none=True),
    )
    return request.app.state.limiter._inject_headers(  # noqa: SLF001
        response, request.state.view_rate_limit
    )


def setup_throttling(app: FastAPI) -> None:
    """Attach the limiter and its 429 handler to the application."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    logger.info("Request throttling configured", enabled=limiter.enabled)
