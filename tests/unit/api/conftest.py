"""API test fixtures.

The application is built without its lifespan; services are wired onto
``app.state`` over the in-memory stores and the Redis double instead.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from portfolio.auth.jwt import create_access_token
from portfolio.cache.client import CacheClient
from portfolio.core.config import get_settings
from portfolio.core.events import build_services
from portfolio.factory import create_app


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

    from fastapi import FastAPI

    from tests.fixtures.fakes import (
        FakeRedis,
        InMemoryArticleStore,
        InMemoryBannerStore,
    )


@asynccontextmanager
async def _no_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield


@pytest.fixture
def app(
    fake_redis: FakeRedis,
    article_store: InMemoryArticleStore,
    banner_store: InMemoryBannerStore,
) -> FastAPI:
    """Application wired to in-memory doubles."""
    settings = get_settings()
    application = create_app(settings, lifespan_handler=_no_lifespan)
    build_services(
        application,
        settings,
        CacheClient(client=fake_redis),
        article_store,
        banner_store,
    )
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = create_access_token("admin-1", roles=["admin"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers() -> dict[str, str]:
    token = create_access_token("user-1", roles=["user"])
    return {"Authorization": f"Bearer {token}"}
