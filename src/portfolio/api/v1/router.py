"""API v1 router aggregating all endpoint routers.

All endpoints are mounted under the configured ``api.v1_prefix``
(``/api/v1`` by default).
"""

from __future__ import annotations

from fastapi import APIRouter

from portfolio.api.v1.endpoints import articles, banners, health


router = APIRouter()

router.include_router(health.router)
router.include_router(articles.router)
router.include_router(banners.router)
