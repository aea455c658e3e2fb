"""Unit tests for ArticleService.

Tests cover:
- Slug assignment on create and on title changes
- Synchronous cache invalidation on every mutation
- Archive / restore
- Concurrent slug races and save failures
- Reads through the cache, including during a cache outage
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from portfolio.content.exceptions import (
    ContentNotFoundError,
    ContentSaveError,
    ContentStoreError,
    NoChangesError,
    SlugAllocationError,
)
from portfolio.content.models import ArticleCreate, ArticleQuery, ArticleUpdate
from tests.factories.content import ArticleCreateFactory


if TYPE_CHECKING:
    from portfolio.services.articles.service import ArticleService
    from tests.fixtures.fakes import FakeRedis, InMemoryArticleStore

pytestmark = pytest.mark.unit


def _payload(title: str, **fields: object) -> ArticleCreate:
    return ArticleCreateFactory.build(title=title, **fields)


class TestCreate:
    """Tests for ArticleService.create."""

    async def test_assigns_slugs_with_suffix_on_collision(
        self, article_service: ArticleService
    ) -> None:
        """Should suffix the second of two titles sharing the base hello-world."""
        first = await article_service.create(_payload("Hello World!"))
        second = await article_service.create(_payload("Hello, World"))

        assert first.slug == "hello-world"
        assert second.slug == "hello-world-1"

        updated = await article_service.update(
            first.id, ArticleUpdate(description="Unrelated change")
        )

        assert updated.slug == "hello-world"
        assert (await article_service.get_by_slug("hello-world-1")).id == second.id

    async def test_create_invalidates_lists(
        self, article_service: ArticleService, article_store: InMemoryArticleStore
    ) -> None:
        """Should make a new article visible in the next list read."""
        assert await article_service.list_articles(ArticleQuery()) == []

        created = await article_service.create(_payload("Fresh"))
        listed = await article_service.list_articles(ArticleQuery())

        assert [a.id for a in listed] == [created.id]
        assert article_store.calls["find_many"] == 2

    async def test_retries_when_a_concurrent_save_takes_the_slug(
        self, article_service: ArticleService, article_store: InMemoryArticleStore
    ) -> None:
        """Should re-run assignment after a DuplicateSlugError."""
        article_store.slug_races = 2

        article = await article_service.create(_payload("Race"))

        assert article.slug == "race"
        assert article_store.calls["create"] == 3

    async def test_gives_up_after_max_save_attempts(
        self, article_service: ArticleService, article_store: InMemoryArticleStore
    ) -> None:
        """Should raise SlugAllocationError and write nothing."""
        article_store.slug_races = 3

        with pytest.raises(SlugAllocationError):
            await article_service.create(_payload("Race"))

        assert article_store.articles == {}

    async def test_store_failure_fails_the_save(
        self, article_service: ArticleService, article_store: InMemoryArticleStore
    ) -> None:
        """Should surface store failures as ContentSaveError."""
        article_store.down = True

        with pytest.raises(ContentSaveError) as exc_info:
            await article_service.create(_payload("Broken"))

        assert isinstance(exc_info.value.__cause__, ContentStoreError)


class TestUpdate:
    """Tests for ArticleService.update."""

    async def test_unrelated_change_keeps_slug(
        self, article_service: ArticleService
    ) -> None:
        """Should not re-derive the slug when the title is untouched."""
        article = await article_service.create(_payload("Hello World"))

        updated = await article_service.update(
            article.id, ArticleUpdate(description="New description")
        )

        assert updated.slug == "hello-world"
        assert updated.description == "New description"

    async def test_same_title_keeps_slug(
        self, article_service: ArticleService, article_store: InMemoryArticleStore
    ) -> None:
        """Should treat resending the current title as no title change."""
        article = await article_service.create(_payload("Hello World"))
        probes = article_store.calls["slug_exists"]

        updated = await article_service.update(
            article.id, ArticleUpdate(title="Hello World")
        )

        assert updated.slug == "hello-world"
        assert article_store.calls["slug_exists"] == probes

    async def test_title_change_rederives_slug(
        self, article_service: ArticleService
    ) -> None:
        """Should assign a new slug, excluding the article's own."""
        await article_service.create(_payload("Taken Title"))
        article = await article_service.create(_payload("Original"))

        updated = await article_service.update(
            article.id, ArticleUpdate(title="Taken Title")
        )

        assert updated.slug == "taken-title-1"

    async def test_case_only_title_change_keeps_slug(
        self, article_service: ArticleService
    ) -> None:
        """Should not collide with its own current slug."""
        article = await article_service.create(_payload("Hello World"))

        updated = await article_service.update(
            article.id, ArticleUpdate(title="HELLO world")
        )

        assert updated.slug == "hello-world"

    async def test_reads_after_update_see_new_state(
        self, article_service: ArticleService
    ) -> None:
        """Should invalidate id, old slug, new slug and lists before returning."""
        article = await article_service.create(_payload("Before"))
        await article_service.get(article.id)
        await article_service.get_by_slug("before")
        await article_service.list_articles(ArticleQuery())

        await article_service.update(article.id, ArticleUpdate(title="After"))

        assert (await article_service.get(article.id)).title == "After"
        assert (await article_service.get_by_slug("after")).title == "After"
        with pytest.raises(ContentNotFoundError):
            await article_service.get_by_slug("before")
        listed = await article_service.list_articles(ArticleQuery())
        assert [a.slug for a in listed] == ["after"]

    async def test_empty_update_raises(self, article_service: ArticleService) -> None:
        """Should reject updates without fields."""
        article = await article_service.create(_payload("Hello"))

        with pytest.raises(NoChangesError, match="No fields to update"):
            await article_service.update(article.id, ArticleUpdate())

    async def test_unknown_article_raises(
        self, article_service: ArticleService
    ) -> None:
        with pytest.raises(ContentNotFoundError):
            await article_service.update(uuid4(), ArticleUpdate(description="x"))


class TestArchive:
    """Tests for archive / restore."""

    async def test_archive_hides_from_public_lists(
        self, article_service: ArticleService
    ) -> None:
        """Should remove the article from non-archived lists immediately."""
        article = await article_service.create(_payload("Hidden"))
        await article_service.list_articles(ArticleQuery())

        archived = await article_service.archive(article.id)

        assert archived.archived is True
        assert await article_service.list_articles(ArticleQuery()) == []
        admin_view = await article_service.list_articles(
            ArticleQuery(include_archived=True)
        )
        assert [a.id for a in admin_view] == [article.id]

    async def test_restore_brings_it_back(
        self, article_service: ArticleService
    ) -> None:
        article = await article_service.create(_payload("Back"))
        await article_service.archive(article.id)

        restored = await article_service.restore(article.id)

        assert restored.archived is False
        listed = await article_service.list_articles(ArticleQuery())
        assert [a.id for a in listed] == [article.id]

    async def test_archive_unknown_article_raises(
        self, article_service: ArticleService
    ) -> None:
        with pytest.raises(ContentNotFoundError):
            await article_service.archive(uuid4())


class TestReads:
    """Tests for the read operations."""

    async def test_repeated_reads_hit_store_once(
        self, article_service: ArticleService, article_store: InMemoryArticleStore
    ) -> None:
        """Should serve repeated reads from the cache."""
        article = await article_service.create(_payload("Cached"))

        for _ in range(3):
            await article_service.get(article.id)
            await article_service.get_by_slug("cached")

        assert article_store.calls["find_by_id"] == 1
        assert article_store.calls["find_by_slug"] == 0

    async def test_get_by_id_or_slug(self, article_service: ArticleService) -> None:
        """Should accept either a UUID or a slug."""
        article = await article_service.create(_payload("Either Way"))

        assert (await article_service.get_by_id_or_slug(str(article.id))).id == (
            article.id
        )
        assert (await article_service.get_by_id_or_slug("either-way")).id == (
            article.id
        )

    async def test_list_products(self, article_service: ArticleService) -> None:
        """Should list non-archived product articles, newest first."""
        old = await article_service.create(_payload("Old", tags=["product"]))
        new = await article_service.create(_payload("New", tags=["product", "x"]))
        await article_service.create(_payload("Post", tags=["news"]))
        gone = await article_service.create(_payload("Gone", tags=["product"]))
        await article_service.archive(gone.id)

        products = await article_service.list_products()

        assert [a.id for a in products] == [new.id, old.id]

    async def test_reads_survive_cache_outage(
        self,
        article_service: ArticleService,
        article_store: InMemoryArticleStore,
        fake_redis: FakeRedis,
    ) -> None:
        """Should keep serving and mutating correctly with the cache down."""
        article = await article_service.create(_payload("Resilient"))
        fake_redis.down = True

        updated = await article_service.update(
            article.id, ArticleUpdate(description="changed")
        )
        fetched = await article_service.get(article.id)

        assert fetched.description == updated.description == "changed"
        assert article_store.calls["find_by_id"] >= 2
