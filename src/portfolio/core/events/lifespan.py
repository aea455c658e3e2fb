"""Application lifespan event handlers.

This module defines the lifespan context manager that handles:
- Application startup: connect the cache, open the database pool, build
  the content services and store them on ``app.state``
- Application shutdown: close the cache client and the database pool
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from portfolio.cache.client import CacheClient, CacheUnavailableError
from portfolio.cache.keys import CacheKeys
from portfolio.cache.rate_limit import RateLimiter
from portfolio.content.cache import ContentCache
from portfolio.content.models import Article, ArticleSummary, Banner
from portfolio.content.slugs import SlugAssigner
from portfolio.core.config import Settings, get_settings
from portfolio.database.connection import close_database_pool, init_database_pool
from portfolio.database.repositories import ArticleRepository, BannerRepository
from portfolio.database.schema import apply_schema
from portfolio.observability.logging import get_logger, setup_logging
from portfolio.services.articles.constants import (
    ARTICLE_RESOURCE,
    ARTICLES_NAMESPACE,
)
from portfolio.services.articles.service import ArticleService
from portfolio.services.auth.service import LoginGuard
from portfolio.services.banners.constants import (
    BANNER_RESOURCE,
    BANNERS_NAMESPACE,
)
from portfolio.services.banners.service import BannerService


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

    from portfolio.content.protocol import ArticleStore, BannerStore

logger = get_logger(__name__)


def build_services(
    app: FastAPI,
    settings: Settings,
    cache_client: CacheClient,
    article_store: ArticleStore,
    banner_store: BannerStore,
) -> None:
    """Wire the content services and the login guard onto ``app.state``."""
    keys = CacheKeys(settings.cache.prefix)

    article_cache: ContentCache[Article, ArticleSummary] = ContentCache(
        cache_client,
        keys,
        namespace=ARTICLES_NAMESPACE,
        resource=ARTICLE_RESOURCE,
        detail_model=Article,
        item_model=ArticleSummary,
        detail_ttl=settings.cache.detail_ttl,
        list_ttl=settings.cache.list_ttl,
    )
    banner_cache: ContentCache[Banner, Banner] = ContentCache(
        cache_client,
        keys,
        namespace=BANNERS_NAMESPACE,
        resource=BANNER_RESOURCE,
        detail_model=Banner,
        item_model=Banner,
        detail_ttl=settings.cache.detail_ttl,
        list_ttl=settings.cache.list_ttl,
    )

    app.state.cache_client = cache_client
    app.state.article_service = ArticleService(
        article_store,
        article_cache,
        SlugAssigner(
            article_store.slug_exists,
            max_suffix=settings.content.slug_max_suffix,
        ),
        max_save_attempts=settings.content.max_save_attempts,
    )
    app.state.banner_service = BannerService(banner_store, banner_cache)
    app.state.login_guard = LoginGuard(
        RateLimiter(
            cache_client,
            max_attempts=settings.rate_limiting.login.max_attempts,
            window_seconds=settings.rate_limiting.login.window_seconds,
        ),
        keys,
        admin_setup_max_attempts=settings.rate_limiting.admin_setup.max_attempts,
        admin_setup_window_seconds=settings.rate_limiting.admin_setup.window_seconds,
    )


async def _init_cache(settings: Settings) -> CacheClient:
    """Connect the cache client; the service keeps running without it.

    A failed first ping leaves the client in place so cache reads and the
    login limiter recover as soon as Redis does.
    """
    cache_client = CacheClient(
        settings.redis_cache_url,
        timeout=settings.cache.operation_timeout,
        max_connections=settings.redis.max_connections,
    )
    try:
        await cache_client.connect()
    except CacheUnavailableError:
        logger.exception("Failed to connect to Redis - continuing degraded")
    return cache_client


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup."""
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    cache_client = await _init_cache(settings)

    # The primary store is critical - don't continue without it
    pool = await init_database_pool()
    if settings.database.auto_migrate:
        await apply_schema(pool)

    build_services(
        app,
        settings,
        cache_client,
        ArticleRepository(pool),
        BannerRepository(pool),
    )
    logger.info("Application startup complete")


async def _shutdown(app: FastAPI) -> None:
    """Shutdown all application services."""
    logger.info("Shutting down application")

    cache_client: CacheClient | None = getattr(app.state, "cache_client", None)
    if cache_client is not None:
        await cache_client.close()

    await close_database_pool()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings = get_settings()
    await _startup(app, settings)
    try:
        yield
    finally:
        await _shutdown(app)
