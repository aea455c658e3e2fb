"""FastAPI dependencies for service access.

Services are built during application startup and stored in app.state;
a missing service means startup could not build it and the route answers
503.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import Request

from portfolio.core.exceptions import ServiceUnavailableException


if TYPE_CHECKING:
    from portfolio.cache.client import CacheClient
    from portfolio.services.articles.service import ArticleService
    from portfolio.services.banners.service import BannerService


def _from_state(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise ServiceUnavailableException(f"{label} not available")
    return service


async def get_article_service(request: Request) -> ArticleService:
    """Get the article service from app state.

    Raises:
        ServiceUnavailableException: 503 if the service is not initialized.
    """
    service: ArticleService = _from_state(request, "article_service", "Article service")
    return service


async def get_banner_service(request: Request) -> BannerService:
    """Get the banner service from app state.

    Raises:
        ServiceUnavailableException: 503 if the service is not initialized.
    """
    service: BannerService = _from_state(request, "banner_service", "Banner service")
    return service


async def get_cache_client(request: Request) -> CacheClient | None:
    """Get the cache client, or None when the app runs without a cache."""
    return getattr(request.app.state, "cache_client", None)
