"""Read-through content cache with synchronous write invalidation.

Cache-aside, not write-through:
- Reads consult the cache, fall back to the store on a miss and repopulate
- Detail misses are stored under both the id key and the slug key
- Every successful mutation deletes the entity's detail keys and the list
  keys before returning; the next read repopulates lazily
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import orjson
from pydantic import BaseModel, TypeAdapter, ValidationError

from portfolio.content.exceptions import ContentNotFoundError
from portfolio.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from portfolio.cache.client import CacheClient
    from portfolio.cache.keys import CacheKeys

logger = get_logger(__name__)

DetailT = TypeVar("DetailT", bound=BaseModel)
ItemT = TypeVar("ItemT", bound=BaseModel)


def query_fingerprint(query: BaseModel) -> str:
    """Deterministic short hash of a query's filter signature."""
    payload = orjson.dumps(
        query.model_dump(mode="json", by_alias=False),
        option=orjson.OPT_SORT_KEYS,
    )
    return hashlib.sha256(payload).hexdigest()[:16]


class ContentCache(Generic[DetailT, ItemT]):
    """Cache facade for one content kind (e.g. articles, banners).

    Loaders passed to the read methods are zero-argument coroutines that
    hit the primary store; they are only awaited on a cache miss.
    """

    def __init__(
        self,
        cache_client: CacheClient,
        keys: CacheKeys,
        *,
        namespace: str,
        resource: str,
        detail_model: type[DetailT],
        item_model: type[ItemT],
        detail_ttl: int,
        list_ttl: int,
    ) -> None:
        """Initialize the facade.

        Args:
            cache_client: Shared key-value cache client.
            keys: Key schema.
            namespace: Key namespace ("articles", "banners").
            resource: Human-readable name used in not-found errors.
            detail_model: Model of single-entity values.
            item_model: Model of list items.
            detail_ttl: TTL in seconds for detail entries.
            list_ttl: TTL in seconds for list entries.
        """
        self._cache = cache_client
        self._keys = keys
        self.namespace = namespace
        self.resource = resource
        self._detail_model = detail_model
        self._list_adapter: TypeAdapter[list[ItemT]] = TypeAdapter(list[item_model])
        self.detail_ttl = detail_ttl
        self.list_ttl = list_ttl

    def detail_key(self, id_or_slug: str) -> str:
        return self._keys.detail_key(self.namespace, id_or_slug)

    def list_key(self, query: BaseModel) -> str:
        return self._keys.list_key(self.namespace, query_fingerprint(query))

    # -------------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------------

    async def get_entity(
        self,
        entity_id: str,
        loader: Callable[[], Awaitable[DetailT | None]],
    ) -> DetailT:
        """Get one entity by primary id.

        Raises:
            ContentNotFoundError: If the store has no such entity.
        """
        return await self._get_detail(entity_id, loader)

    async def get_entity_by_slug(
        self,
        slug: str,
        loader: Callable[[], Awaitable[DetailT | None]],
    ) -> DetailT:
        """Get one entity by its slug.

        Raises:
            ContentNotFoundError: If the store has no such entity.
        """
        return await self._get_detail(slug, loader)

    async def get_list(
        self,
        query: BaseModel,
        loader: Callable[[], Awaitable[list[ItemT]]],
    ) -> list[ItemT]:
        """Get a collection for a filter signature."""
        key = self.list_key(query)

        cached = await self._cache.get(key)
        if cached is not None:
            try:
                return self._list_adapter.validate_python(cached)
            except ValidationError:
                logger.warning("Discarding stale list cache entry", key=key)

        items = await loader()
        await self._cache.set(
            key,
            self._list_adapter.dump_python(items, mode="json", by_alias=True),
            self.list_ttl,
        )
        return items

    async def _get_detail(
        self,
        identifier: str,
        loader: Callable[[], Awaitable[DetailT | None]],
    ) -> DetailT:
        key = self.detail_key(identifier)

        cached = await self._cache.get(key)
        if cached is not None:
            try:
                return self._detail_model.model_validate(cached)
            except ValidationError:
                logger.warning("Discarding stale detail cache entry", key=key)

        entity = await loader()
        if entity is None:
            raise ContentNotFoundError(self.resource, identifier)

        payload = entity.model_dump(mode="json", by_alias=True)
        for alias in self._identifiers(entity):
            await self._cache.set(self.detail_key(alias), payload, self.detail_ttl)
        return entity

    @staticmethod
    def _identifiers(entity: BaseModel) -> list[str]:
        """Every key an entity is reachable under: its id, then its slug."""
        identifiers = [str(entity.id)]  # type: ignore[attr-defined]
        slug: Any = getattr(entity, "slug", None)
        if slug:
            identifiers.append(slug)
        return identifiers

    # -------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------

    async def invalidate_entity(self, entity_id: str, *slugs: str | None) -> None:
        """Delete the detail keys for an id and any of its (old or new) slugs.

        Absent keys are ignored, so invalidation is idempotent.
        """
        keys = {self.detail_key(entity_id)}
        keys.update(self.detail_key(slug) for slug in slugs if slug)
        await self._cache.delete(*sorted(keys))
        logger.debug("Invalidated entity", namespace=self.namespace, id=entity_id)

    async def invalidate_list(self) -> None:
        """Delete every cached list of this namespace."""
        await self._cache.delete_pattern(self._keys.list_pattern(self.namespace))
        logger.debug("Invalidated lists", namespace=self.namespace)
