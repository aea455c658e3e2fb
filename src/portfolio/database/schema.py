"""Schema bootstrap for the content tables.

The UNIQUE index on ``articles.slug`` is what finally guarantees two
articles never share a slug; concurrent creates that both pass the slug
probe fail here and are retried by the article service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from portfolio.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

logger = get_logger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS articles (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        title VARCHAR(100) NOT NULL,
        description VARCHAR(300) NOT NULL,
        content TEXT NOT NULL,
        cover_image TEXT,
        product_url TEXT,
        tags TEXT[] NOT NULL DEFAULT '{}',
        archived BOOLEAN NOT NULL DEFAULT FALSE,
        slug TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS articles_slug_key ON articles (slug)",
    """
    CREATE INDEX IF NOT EXISTS articles_created_at_idx
        ON articles (created_at DESC)
    """,
    """
    CREATE TABLE IF NOT EXISTS banners (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        title VARCHAR(100) NOT NULL,
        banner_image TEXT,
        action JSONB,
        archived BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
)


async def apply_schema(pool: Pool) -> None:
    """Create the content tables and indexes if they do not exist."""
    async with pool.acquire() as conn, conn.transaction():
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
    logger.info("Database schema applied", statements=len(SCHEMA_STATEMENTS))
