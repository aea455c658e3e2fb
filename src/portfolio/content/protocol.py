"""Primary store interfaces consumed by the content services.

The document store is authoritative; implementations must raise
``DuplicateSlugError`` from ``create``/``update_by_id`` when a unique slug
collides and ``ContentStoreError`` for any other store failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from uuid import UUID

    from portfolio.content.models import (
        Article,
        ArticleQuery,
        ArticleSummary,
        Banner,
        BannerQuery,
    )


@runtime_checkable
class ArticleStore(Protocol):
    """Article persistence: lookups by id or slug, queries, writes."""

    async def find_by_id(self, article_id: UUID) -> Article | None: ...

    async def find_by_slug(self, slug: str) -> Article | None: ...

    async def find_many(self, query: ArticleQuery) -> list[ArticleSummary]: ...

    async def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool: ...

    async def create(self, fields: dict[str, Any]) -> Article: ...

    async def update_by_id(
        self, article_id: UUID, fields: dict[str, Any]
    ) -> Article | None: ...


@runtime_checkable
class BannerStore(Protocol):
    """Banner persistence."""

    async def find_by_id(self, banner_id: UUID) -> Banner | None: ...

    async def find_many(self, query: BannerQuery) -> list[Banner]: ...

    async def create(self, fields: dict[str, Any]) -> Banner: ...

    async def update_by_id(
        self, banner_id: UUID, fields: dict[str, Any]
    ) -> Banner | None: ...
