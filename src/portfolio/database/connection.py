"""PostgreSQL connection pool management.

This module provides:
- Async connection pool management via asyncpg
- JSONB codec registration (orjson) on every pooled connection
- Connection lifecycle management via lifespan events
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncpg
import orjson

from portfolio.core.config import get_settings
from portfolio.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Connection, Pool

logger = get_logger(__name__)

_pool: Pool | None = None


async def _init_connection(conn: Connection) -> None:
    await conn.set_type_codec(
        "jsonb",
        encoder=lambda value: orjson.dumps(value).decode(),
        decoder=orjson.loads,
        schema="pg_catalog",
    )


async def init_database_pool() -> Pool:
    """Initialize the PostgreSQL connection pool.

    Should be called during application startup (lifespan).

    Returns:
        The created pool.
    """
    global _pool  # noqa: PLW0603

    settings = get_settings()

    logger.info(
        "Initializing database connection pool",
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
    )

    _pool = await asyncpg.create_pool(
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
        user=settings.database.user,
        password=settings.DATABASE_PASSWORD or None,
        min_size=settings.database.min_pool_size,
        max_size=settings.database.max_pool_size,
        command_timeout=settings.database.command_timeout,
        ssl=settings.database.ssl if settings.database.ssl else None,
        init=_init_connection,
    )

    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        logger.info("Database connection established successfully")
    except asyncpg.PostgresError:
        logger.exception("Failed to connect to database")
        raise

    return _pool


async def close_database_pool() -> None:
    """Close the PostgreSQL connection pool.

    Should be called during application shutdown (lifespan).
    """
    global _pool  # noqa: PLW0603

    if _pool:
        logger.info("Closing database connection pool")
        await _pool.close()
        _pool = None


def get_database_pool() -> Pool:
    """Get the database connection pool.

    Raises:
        RuntimeError: If the pool is not initialized.
    """
    if _pool is None:
        msg = "Database pool not initialized. Call init_database_pool() first."
        raise RuntimeError(msg)
    return _pool


async def check_database_health() -> str:
    """Return "healthy", "unhealthy" or "not_initialized"."""
    if _pool is None:
        return "not_initialized"
    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError):
        return "unhealthy"
    return "healthy"
