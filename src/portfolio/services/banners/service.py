"""Banner service for homepage banners."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from portfolio.content.exceptions import (
    ContentNotFoundError,
    ContentSaveError,
    ContentStoreError,
    NoChangesError,
)
from portfolio.content.models import BannerQuery
from portfolio.observability.logging import get_logger
from portfolio.services.banners.constants import BANNER_RESOURCE


if TYPE_CHECKING:
    from collections.abc import Awaitable
    from uuid import UUID

    from portfolio.content.cache import ContentCache
    from portfolio.content.models import Banner, BannerCreate, BannerUpdate
    from portfolio.content.protocol import BannerStore

logger = get_logger(__name__)


class BannerService:
    """Service for reading and mutating banners."""

    def __init__(
        self,
        store: BannerStore,
        cache: ContentCache[Banner, Banner],
    ) -> None:
        self._store = store
        self._cache = cache

    async def get(self, banner_id: UUID) -> Banner:
        return await self._cache.get_entity(
            str(banner_id), partial(self._store.find_by_id, banner_id)
        )

    async def list_banners(self, query: BannerQuery | None = None) -> list[Banner]:
        query = query or BannerQuery()
        return await self._cache.get_list(query, partial(self._store.find_many, query))

    async def create(self, data: BannerCreate) -> Banner:
        banner = await self._save(
            "create", self._store.create(data.model_dump(by_alias=False))
        )
        await self._invalidate(banner)
        logger.info("Banner created", banner_id=str(banner.id))
        return banner

    async def update(self, banner_id: UUID, changes: BannerUpdate) -> Banner:
        """Apply a partial update.

        Raises:
            NoChangesError: If ``changes`` carries no fields.
            ContentNotFoundError: If the banner does not exist.
        """
        fields = changes.changes()
        if not fields:
            raise NoChangesError
        return await self._update(banner_id, fields, "update")

    async def archive(self, banner_id: UUID) -> Banner:
        return await self._update(banner_id, {"archived": True}, "archive")

    async def _update(
        self, banner_id: UUID, fields: dict[str, Any], operation: str
    ) -> Banner:
        banner = await self._save(
            operation, self._store.update_by_id(banner_id, fields)
        )
        if banner is None:
            raise ContentNotFoundError(BANNER_RESOURCE, str(banner_id))
        await self._invalidate(banner)
        logger.info("Banner updated", banner_id=str(banner_id), fields=sorted(fields))
        return banner

    async def _invalidate(self, banner: Banner) -> None:
        await self._cache.invalidate_entity(str(banner.id))
        await self._cache.invalidate_list()

    @staticmethod
    async def _save(operation: str, write: Awaitable[Any]) -> Any:
        try:
            return await write
        except ContentStoreError as exc:
            logger.error("Banner save failed", operation=operation, error=str(exc))
            msg = f"Could not {operation} banner"
            raise ContentSaveError(msg) from exc
