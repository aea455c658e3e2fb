"""Article repository.

Provides the PostgreSQL implementation of ``ArticleStore``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from portfolio.content.models import Article, ArticleSummary
from portfolio.database.connection import get_database_pool
from portfolio.database.errors import translate_store_errors
from portfolio.observability.logging import get_logger


if TYPE_CHECKING:
    from uuid import UUID

    from asyncpg import Pool, Record

    from portfolio.content.models import ArticleQuery

logger = get_logger(__name__)


_SUMMARY_COLUMNS = (
    "id, title, description, cover_image, product_url, tags, archived, slug, "
    "created_at, updated_at"
)
_DETAIL_COLUMNS = f"{_SUMMARY_COLUMNS}, content"

_WRITABLE_COLUMNS = frozenset(
    {
        "title",
        "description",
        "content",
        "cover_image",
        "product_url",
        "tags",
        "archived",
        "slug",
    }
)

_ORDER_BY = {
    "newest": "created_at DESC, id",
    "oldest": "created_at ASC, id",
    "updated": "updated_at DESC, id",
}


class ArticleRepository:
    """Repository for article data access.

    Uses raw asyncpg queries against the ``articles`` table.
    """

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

    async def find_by_id(self, article_id: UUID) -> Article | None:
        query = f"SELECT {_DETAIL_COLUMNS} FROM articles WHERE id = $1"
        with translate_store_errors("find article by id"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, article_id)
        return self._row_to_article(row) if row else None

    async def find_by_slug(self, slug: str) -> Article | None:
        query = f"SELECT {_DETAIL_COLUMNS} FROM articles WHERE slug = $1"
        with translate_store_errors("find article by slug"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, slug)
        return self._row_to_article(row) if row else None

    async def find_many(self, query: ArticleQuery) -> list[ArticleSummary]:
        """List article summaries matching a query.

        Tag filters match articles carrying every requested tag.
        """
        conditions: list[str] = []
        params: list[Any] = []

        if not query.include_archived:
            conditions.append("archived = FALSE")
        if query.tags:
            params.append(query.tags)
            conditions.append(f"tags @> ${len(params)}::text[]")

        sql = f"SELECT {_SUMMARY_COLUMNS} FROM articles"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += f" ORDER BY {_ORDER_BY[query.sort]}"
        if query.limit is not None:
            params.append(query.limit)
            sql += f" LIMIT ${len(params)}"

        with translate_store_errors("list articles"):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        return [ArticleSummary.model_validate(dict(row)) for row in rows]

    async def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        query = """
            SELECT EXISTS(
                SELECT 1 FROM articles
                WHERE slug = $1 AND ($2::uuid IS NULL OR id <> $2::uuid)
            )
        """
        with translate_store_errors("probe article slug"):
            async with self.pool.acquire() as conn:
                return bool(await conn.fetchval(query, slug, exclude_id))

    async def create(self, fields: dict[str, Any]) -> Article:
        """Insert an article.

        Raises:
            DuplicateSlugError: If the slug is already taken.
            ContentStoreError: On any other store failure.
        """
        columns = self._writable(fields)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = (
            f"INSERT INTO articles ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING {_DETAIL_COLUMNS}"
        )

        with translate_store_errors("create article", slug=fields.get("slug")):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, *(fields[c] for c in columns))

        logger.debug("Inserted article", slug=row["slug"])
        return self._row_to_article(row)

    async def update_by_id(
        self, article_id: UUID, fields: dict[str, Any]
    ) -> Article | None:
        """Apply column updates and bump ``updated_at``.

        Returns:
            The updated article, or None if no article has this id.

        Raises:
            DuplicateSlugError: If a new slug is already taken.
            ContentStoreError: On any other store failure.
        """
        columns = self._writable(fields)
        assignments = [f"{column} = ${i}" for i, column in enumerate(columns, start=2)]
        assignments.append("updated_at = now()")
        query = (
            f"UPDATE articles SET {', '.join(assignments)} "
            f"WHERE id = $1 RETURNING {_DETAIL_COLUMNS}"
        )

        with translate_store_errors("update article", slug=fields.get("slug")):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    query, article_id, *(fields[c] for c in columns)
                )
        return self._row_to_article(row) if row else None

    @staticmethod
    def _writable(fields: dict[str, Any]) -> list[str]:
        unknown = set(fields) - _WRITABLE_COLUMNS
        if unknown:
            msg = f"Unknown article columns: {sorted(unknown)}"
            raise ValueError(msg)
        return sorted(fields)

    @staticmethod
    def _row_to_article(row: Record) -> Article:
        return Article.model_validate(dict(row))
