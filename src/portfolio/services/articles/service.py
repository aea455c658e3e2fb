"""Article service.

Orchestrates:
1. Slug assignment against the primary store
2. Persistence through an ``ArticleStore``
3. Read-through caching and synchronous invalidation via ``ContentCache``
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import TYPE_CHECKING
from uuid import UUID

from portfolio.content.exceptions import (
    ContentNotFoundError,
    ContentSaveError,
    ContentStoreError,
    DuplicateSlugError,
    NoChangesError,
    SlugAllocationError,
)
from portfolio.content.models import PRODUCT_TAG, ArticleQuery
from portfolio.content.slugs import base_slug
from portfolio.observability.logging import get_logger
from portfolio.services.articles.constants import (
    ARTICLE_RESOURCE,
    DEFAULT_MAX_SAVE_ATTEMPTS,
)


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

    from portfolio.content.cache import ContentCache
    from portfolio.content.models import (
        Article,
        ArticleCreate,
        ArticleSummary,
        ArticleUpdate,
    )
    from portfolio.content.protocol import ArticleStore
    from portfolio.content.slugs import SlugAssigner

logger = get_logger(__name__)


class ArticleService:
    """Service for reading and mutating articles.

    Every successful mutation invalidates the affected detail keys and all
    article list keys before returning.
    """

    def __init__(
        self,
        store: ArticleStore,
        cache: ContentCache[Article, ArticleSummary],
        slugs: SlugAssigner,
        *,
        max_save_attempts: int = DEFAULT_MAX_SAVE_ATTEMPTS,
    ) -> None:
        """Initialize the article service.

        Args:
            store: Primary article store.
            cache: Article cache facade.
            slugs: Slug assigner probing the same store.
            max_save_attempts: Writes tried when a concurrent save takes the
                assigned slug first.
        """
        self._store = store
        self._cache = cache
        self._slugs = slugs
        self.max_save_attempts = max_save_attempts

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, article_id: UUID) -> Article:
        return await self._cache.get_entity(
            str(article_id), partial(self._store.find_by_id, article_id)
        )

    async def get_by_slug(self, slug: str) -> Article:
        return await self._cache.get_entity_by_slug(
            slug, partial(self._store.find_by_slug, slug)
        )

    async def get_by_id_or_slug(self, value: str) -> Article:
        """Resolve a path segment that may be either a UUID or a slug."""
        try:
            article_id = UUID(value)
        except ValueError:
            return await self.get_by_slug(value)
        return await self.get(article_id)

    async def list_articles(self, query: ArticleQuery) -> list[ArticleSummary]:
        return await self._cache.get_list(query, partial(self._store.find_many, query))

    async def list_products(self) -> list[ArticleSummary]:
        """Non-archived articles tagged as products, newest first."""
        return await self.list_articles(ArticleQuery(tags=[PRODUCT_TAG]))

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create(self, data: ArticleCreate) -> Article:
        """Create an article with a freshly assigned unique slug.

        Raises:
            SlugAllocationError: If no free slug could be assigned.
            ContentSaveError: If the store rejected the write.
        """
        fields = data.model_dump(by_alias=False)

        async def write(slug: str) -> Article | None:
            return await self._store.create({**fields, "slug": slug})

        with self._save_errors("create"):
            article = await self._write_with_slug(data.title, write)

        if article is None:
            msg = "Store returned no article after insert"
            raise ContentSaveError(msg)

        await self._invalidate(article)
        logger.info("Article created", article_id=str(article.id), slug=article.slug)
        return article

    async def update(self, article_id: UUID, changes: ArticleUpdate) -> Article:
        """Apply a partial update.

        The slug is re-derived only when the title actually changes; the
        article's own current slug never counts as a collision.

        Raises:
            NoChangesError: If ``changes`` carries no fields.
            ContentNotFoundError: If the article does not exist.
            SlugAllocationError: If no free slug could be assigned.
            ContentSaveError: If the store rejected the write.
        """
        fields = changes.changes()
        if not fields:
            raise NoChangesError

        with self._save_errors("update"):
            current = await self._store.find_by_id(article_id)
            if current is None:
                raise ContentNotFoundError(ARTICLE_RESOURCE, str(article_id))

            new_title = fields.get("title")
            if new_title is not None and new_title != current.title:

                async def write(slug: str) -> Article | None:
                    return await self._store.update_by_id(
                        article_id, {**fields, "slug": slug}
                    )

                updated = await self._write_with_slug(
                    new_title, write, exclude_id=article_id
                )
            else:
                updated = await self._store.update_by_id(article_id, fields)

        if updated is None:
            raise ContentNotFoundError(ARTICLE_RESOURCE, str(article_id))

        await self._invalidate(updated, current.slug)
        logger.info(
            "Article updated",
            article_id=str(article_id),
            fields=sorted(fields),
            slug=updated.slug,
        )
        return updated

    async def archive(self, article_id: UUID) -> Article:
        """Soft-delete an article; it disappears from public lists."""
        return await self._set_archived(article_id, archived=True)

    async def restore(self, article_id: UUID) -> Article:
        return await self._set_archived(article_id, archived=False)

    async def _set_archived(self, article_id: UUID, *, archived: bool) -> Article:
        with self._save_errors("archive" if archived else "restore"):
            article = await self._store.update_by_id(
                article_id, {"archived": archived}
            )
        if article is None:
            raise ContentNotFoundError(ARTICLE_RESOURCE, str(article_id))

        await self._invalidate(article)
        logger.info(
            "Article archive state changed",
            article_id=str(article_id),
            archived=archived,
        )
        return article

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _write_with_slug(
        self,
        title: str,
        write: Callable[[str], Awaitable[Article | None]],
        exclude_id: UUID | None = None,
    ) -> Article | None:
        """Assign a slug and write, re-assigning when a concurrent save wins."""
        for attempt in range(1, self.max_save_attempts + 1):
            slug = await self._slugs.assign(title, exclude_id)
            try:
                return await write(slug)
            except DuplicateSlugError:
                logger.warning(
                    "Slug taken by a concurrent save, retrying",
                    slug=slug,
                    attempt=attempt,
                )
        raise SlugAllocationError(base_slug(title), self.max_save_attempts)

    async def _invalidate(self, article: Article, *old_slugs: str) -> None:
        await self._cache.invalidate_entity(str(article.id), article.slug, *old_slugs)
        await self._cache.invalidate_list()

    @staticmethod
    @contextmanager
    def _save_errors(operation: str) -> Iterator[None]:
        try:
            yield
        except ContentStoreError as exc:
            logger.error("Article save failed", operation=operation, error=str(exc))
            msg = f"Could not {operation} article"
            raise ContentSaveError(msg) from exc
