"""Request logging middleware.

Logs one line when a request starts and one when it completes, with the
resolved client address and the handling time.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from portfolio.observability.logging import bind_context, get_logger
from portfolio.services.auth.service import resolve_client_address


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

logger = get_logger(__name__)

DEFAULT_EXCLUDED_PATHS = frozenset({"/health", "/ready", "/favicon.ico"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for structured request/response logging."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        exclude_paths: set[str] | frozenset[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = (
            DEFAULT_EXCLUDED_PATHS if exclude_paths is None else exclude_paths
        )

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path.rstrip("/").endswith(tuple(self.exclude_paths)):
            return await call_next(request)

        bind_context(
            method=request.method,
            path=request.url.path,
            client_ip=resolve_client_address(
                request.headers.get("x-forwarded-for"),
                request.headers.get("x-real-ip"),
                request.client.host if request.client else None,
            ),
        )
        logger.info(
            "Request started",
            query_params=str(request.query_params) if request.query_params else None,
        )

        started = time.perf_counter()
        response = await call_next(request)

        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
