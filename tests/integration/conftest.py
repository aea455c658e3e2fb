"""Integration test fixtures.

Provides fixtures for integration testing with real Redis via testcontainers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from redis.asyncio import Redis
from testcontainers.redis import RedisContainer

from portfolio.cache.client import CacheClient
from portfolio.cache.keys import CacheKeys


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator


pytestmark = pytest.mark.integration


@pytest.fixture(scope="session")
def redis_container() -> Generator[RedisContainer]:
    """Start a Redis container for the test session."""
    with RedisContainer("redis:7-alpine") as redis:
        yield redis


@pytest.fixture(scope="session")
def redis_url(redis_container: RedisContainer) -> str:
    """Get the Redis URL from the container."""
    host = redis_container.get_container_host_ip()
    port = redis_container.get_exposed_port(6379)
    return f"redis://{host}:{port}/0"


@pytest.fixture
async def redis(redis_url: str) -> AsyncGenerator[Redis]:
    """Raw Redis client for inspecting what the service wrote."""
    client: Redis = Redis.from_url(redis_url, decode_responses=False)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture
async def cache_client(redis_url: str) -> AsyncGenerator[CacheClient]:
    """Cache client connected to the test container."""
    client = CacheClient(redis_url, timeout=0.5)
    await client.connect()
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def keys() -> CacheKeys:
    """Key schema with a per-test prefix."""
    return CacheKeys(f"it-{uuid4().hex[:8]}")
