"""Health check endpoints.

Provides liveness and readiness probes for orchestrators and load balancers.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from portfolio.api.dependencies import get_cache_client
from portfolio.api.throttling import limiter
from portfolio.cache.client import CacheClient
from portfolio.core.config import Settings, get_settings
from portfolio.database.connection import check_database_health


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Health status", examples=["healthy"])
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Current server timestamp",
    )
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")


class ReadinessResponse(HealthResponse):
    """Readiness check response with dependency status."""

    dependencies: dict[str, str] = Field(
        default_factory=dict,
        description="Status of external dependencies",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
)
@limiter.exempt
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Check if the service is alive. Does not touch dependencies."""
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"model": ReadinessResponse}},
)
@limiter.exempt
async def readiness_check(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
    cache_client: Annotated[CacheClient | None, Depends(get_cache_client)],
) -> ReadinessResponse:
    """Check whether the service should receive traffic.

    The database is required; the cache is optional, so a cache outage
    only degrades the service.
    """
    dependencies: dict[str, str] = {}

    if cache_client is None or not cache_client.is_connected:
        dependencies["cache"] = "not_configured"
    else:
        dependencies["cache"] = "healthy" if await cache_client.ping() else "unhealthy"

    dependencies["database"] = await check_database_health()

    if dependencies["database"] != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        overall = "not_ready"
    elif dependencies["cache"] == "healthy":
        overall = "ready"
    else:
        overall = "degraded"

    return ReadinessResponse(
        status=overall,
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
    )
