"""Banner repository.

Provides the PostgreSQL implementation of ``BannerStore``. The banner
call-to-action is stored as a JSONB document.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from portfolio.content.models import Banner
from portfolio.database.connection import get_database_pool
from portfolio.database.errors import translate_store_errors


if TYPE_CHECKING:
    from uuid import UUID

    from asyncpg import Pool, Record

    from portfolio.content.models import BannerQuery


_BANNER_COLUMNS = "id, title, banner_image, action, archived, created_at, updated_at"

_WRITABLE_COLUMNS = frozenset({"title", "banner_image", "action", "archived"})


class BannerRepository:
    """Repository for banner data access."""

    def __init__(self, pool: Pool | None = None) -> None:
        """Initialize repository with optional connection pool.

        Args:
            pool: asyncpg connection pool. If None, uses global pool.
        """
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    async def find_by_id(self, banner_id: UUID) -> Banner | None:
        query = f"SELECT {_BANNER_COLUMNS} FROM banners WHERE id = $1"
        with translate_store_errors("find banner"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, banner_id)
        return self._row_to_banner(row) if row else None

    async def find_many(self, query: BannerQuery) -> list[Banner]:
        sql = f"SELECT {_BANNER_COLUMNS} FROM banners"
        if not query.include_archived:
            sql += " WHERE archived = FALSE"
        sql += " ORDER BY created_at DESC, id"

        with translate_store_errors("list banners"):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(sql)
        return [self._row_to_banner(row) for row in rows]

    async def create(self, fields: dict[str, Any]) -> Banner:
        columns = self._writable(fields)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = (
            f"INSERT INTO banners ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING {_BANNER_COLUMNS}"
        )

        with translate_store_errors("create banner"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, *(fields[c] for c in columns))
        return self._row_to_banner(row)

    async def update_by_id(
        self, banner_id: UUID, fields: dict[str, Any]
    ) -> Banner | None:
        columns = self._writable(fields)
        assignments = [f"{column} = ${i}" for i, column in enumerate(columns, start=2)]
        assignments.append("updated_at = now()")
        query = (
            f"UPDATE banners SET {', '.join(assignments)} "
            f"WHERE id = $1 RETURNING {_BANNER_COLUMNS}"
        )

        with translate_store_errors("update banner"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    query, banner_id, *(fields[c] for c in columns)
                )
        return self._row_to_banner(row) if row else None

    @staticmethod
    def _writable(fields: dict[str, Any]) -> list[str]:
        unknown = set(fields) - _WRITABLE_COLUMNS
        if unknown:
            msg = f"Unknown banner columns: {sorted(unknown)}"
            raise ValueError(msg)
        return sorted(fields)

    @staticmethod
    def _row_to_banner(row: Record) -> Banner:
        return Banner.model_validate(dict(row))
