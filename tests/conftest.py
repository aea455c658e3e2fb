"""Shared test fixtures and configuration for the portfolio content service.

The test environment is selected before any application module is
imported, so the cached settings load ``config/environments/test``.
"""

from __future__ import annotations

import os


os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-unit-tests")

from typing import TYPE_CHECKING  # noqa: E402

import pytest  # noqa: E402

from portfolio.cache.client import CacheClient  # noqa: E402
from portfolio.cache.keys import CacheKeys  # noqa: E402
from portfolio.cache.rate_limit import RateLimiter  # noqa: E402
from portfolio.content.cache import ContentCache  # noqa: E402
from portfolio.content.models import Article, ArticleSummary, Banner  # noqa: E402
from portfolio.content.slugs import SlugAssigner  # noqa: E402
from portfolio.services.articles.service import ArticleService  # noqa: E402
from portfolio.services.banners.service import BannerService  # noqa: E402
from tests.fixtures.fakes import (  # noqa: E402
    FakeRedis,
    InMemoryArticleStore,
    InMemoryBannerStore,
)


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


DETAIL_TTL = 30 * 24 * 60 * 60
LIST_TTL = 30 * 24 * 60 * 60


@pytest.fixture
def fake_redis() -> FakeRedis:
    """In-memory Redis double with a virtual clock."""
    return FakeRedis()


@pytest.fixture
async def cache_client(fake_redis: FakeRedis) -> AsyncGenerator[CacheClient]:
    """Cache client bound to the in-memory Redis double."""
    client = CacheClient(client=fake_redis, timeout=0.25)
    yield client
    await client.close()


@pytest.fixture
def keys() -> CacheKeys:
    return CacheKeys("test")


@pytest.fixture
def rate_limiter(cache_client: CacheClient) -> RateLimiter:
    return RateLimiter(cache_client, max_attempts=5, window_seconds=259200)


@pytest.fixture
def article_store() -> InMemoryArticleStore:
    return InMemoryArticleStore()


@pytest.fixture
def banner_store() -> InMemoryBannerStore:
    return InMemoryBannerStore()


@pytest.fixture
def article_cache(
    cache_client: CacheClient, keys: CacheKeys
) -> ContentCache[Article, ArticleSummary]:
    return ContentCache(
        cache_client,
        keys,
        namespace="articles",
        resource="Article",
        detail_model=Article,
        item_model=ArticleSummary,
        detail_ttl=DETAIL_TTL,
        list_ttl=LIST_TTL,
    )


@pytest.fixture
def banner_cache(
    cache_client: CacheClient, keys: CacheKeys
) -> ContentCache[Banner, Banner]:
    return ContentCache(
        cache_client,
        keys,
        namespace="banners",
        resource="Banner",
        detail_model=Banner,
        item_model=Banner,
        detail_ttl=DETAIL_TTL,
        list_ttl=LIST_TTL,
    )


@pytest.fixture
def article_service(
    article_store: InMemoryArticleStore,
    article_cache: ContentCache[Article, ArticleSummary],
) -> ArticleService:
    """Article service over the in-memory store and the Redis double."""
    return ArticleService(
        article_store,
        article_cache,
        SlugAssigner(article_store.slug_exists, max_suffix=100),
        max_save_attempts=3,
    )


@pytest.fixture
def banner_service(
    banner_store: InMemoryBannerStore,
    banner_cache: ContentCache[Banner, Banner],
) -> BannerService:
    return BannerService(banner_store, banner_cache)
