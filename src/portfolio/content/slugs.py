"""URL slug derivation and unique assignment.

A slug is the lowercased title with every run of non-alphanumeric
characters collapsed to one hyphen. Collisions are resolved by probing the
primary store for ``base``, ``base-1``, ``base-2``... up to a fixed cap.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from portfolio.content.exceptions import SlugAllocationError
from portfolio.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from uuid import UUID

    SlugProbe = Callable[[str, UUID | None], Awaitable[bool]]

logger = get_logger(__name__)

DEFAULT_MAX_SUFFIX = 100
EMPTY_SLUG_FALLBACK = "untitled"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Derive the base slug for a title.

    Example:
        slugify("Hello, World!")  # "hello-world"
    """
    return _NON_ALNUM.sub("-", title.lower()).strip("-")


def base_slug(title: str) -> str:
    """The slug tried first for ``title``; never empty."""
    return slugify(title) or EMPTY_SLUG_FALLBACK


class SlugAssigner:
    """Assigns store-unique slugs with bounded collision retry."""

    def __init__(
        self,
        exists: SlugProbe,
        *,
        max_suffix: int = DEFAULT_MAX_SUFFIX,
    ) -> None:
        """Initialize the assigner.

        Args:
            exists: Async probe ``exists(slug, exclude_id)`` against the store.
                Errors it raises propagate and abort the assignment.
            max_suffix: Highest numeric suffix tried before giving up.
        """
        self._exists = exists
        self.max_suffix = max_suffix

    async def assign(self, title: str, exclude_id: UUID | None = None) -> str:
        """Return the first free slug for ``title``.

        Args:
            title: Display title to derive the slug from.
            exclude_id: Id of the entity being saved, so it never collides
                with its own current slug.

        Raises:
            SlugAllocationError: If ``base`` and every ``base-N`` up to the
                cap are taken.
        """
        base = base_slug(title)

        if not await self._exists(base, exclude_id):
            return base

        for suffix in range(1, self.max_suffix + 1):
            candidate = f"{base}-{suffix}"
            if not await self._exists(candidate, exclude_id):
                logger.debug("Slug collision resolved", base=base, slug=candidate)
                return candidate

        logger.error("Slug suffixes exhausted", base=base, max_suffix=self.max_suffix)
        raise SlugAllocationError(base, self.max_suffix + 1)
