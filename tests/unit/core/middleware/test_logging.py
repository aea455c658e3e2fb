"""Unit tests for logging middleware.

Tests cover:
- Path exclusion
- Request context binding with the resolved client address
- Start and completion log lines
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from portfolio.core.middleware.logging import LoggingMiddleware


pytestmark = pytest.mark.unit

MODULE = "portfolio.core.middleware.logging"


def _request(path: str, headers: dict[str, str] | None = None) -> MagicMock:
    request = MagicMock()
    request.url.path = path
    request.method = "GET"
    request.headers = headers or {}
    request.query_params = {}
    request.client.host = "127.0.0.1"
    return request


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    @pytest.mark.parametrize("path", ["/api/v1/health", "/api/v1/ready/"])
    async def test_skips_probe_paths(self, path: str) -> None:
        middleware = LoggingMiddleware(MagicMock())
        call_next = AsyncMock(return_value=MagicMock())

        with (
            patch(f"{MODULE}.bind_context") as mock_bind,
            patch(f"{MODULE}.logger") as mock_logger,
        ):
            await middleware.dispatch(_request(path), call_next)

        call_next.assert_awaited_once()
        mock_bind.assert_not_called()
        mock_logger.info.assert_not_called()

    async def test_logs_start_and_completion(self) -> None:
        middleware = LoggingMiddleware(MagicMock())
        response = MagicMock(status_code=201)

        with (
            patch(f"{MODULE}.bind_context"),
            patch(f"{MODULE}.logger") as mock_logger,
        ):
            result = await middleware.dispatch(
                _request("/api/v1/articles"), AsyncMock(return_value=response)
            )

        assert result is response
        assert mock_logger.info.call_count == 2
        completed = mock_logger.info.call_args_list[1]
        assert completed.kwargs["status_code"] == 201
        assert completed.kwargs["duration_ms"] >= 0

    async def test_binds_forwarded_client_address(self) -> None:
        """Should key the log context on the first X-Forwarded-For hop."""
        middleware = LoggingMiddleware(MagicMock())
        request = _request(
            "/api/v1/articles", {"x-forwarded-for": "198.51.100.1, 10.0.0.1"}
        )

        with (
            patch(f"{MODULE}.bind_context") as mock_bind,
            patch(f"{MODULE}.logger"),
        ):
            await middleware.dispatch(request, AsyncMock(return_value=MagicMock()))

        assert mock_bind.call_args.kwargs == {
            "method": "GET",
            "path": "/api/v1/articles",
            "client_ip": "198.51.100.1",
        }

    async def test_custom_exclusions(self) -> None:
        middleware = LoggingMiddleware(MagicMock(), exclude_paths={"/metrics"})

        assert middleware.exclude_paths == {"/metrics"}
