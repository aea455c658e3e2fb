"""Content domain: models, slug assignment and the cache facade."""

from portfolio.content.cache import ContentCache, query_fingerprint
from portfolio.content.exceptions import (
    ContentError,
    ContentNotFoundError,
    ContentSaveError,
    ContentStoreError,
    DuplicateSlugError,
    NoChangesError,
    SlugAllocationError,
)
from portfolio.content.slugs import SlugAssigner, base_slug, slugify


__all__ = [
    "ContentCache",
    "ContentError",
    "ContentNotFoundError",
    "ContentSaveError",
    "ContentStoreError",
    "DuplicateSlugError",
    "NoChangesError",
    "SlugAllocationError",
    "SlugAssigner",
    "base_slug",
    "query_fingerprint",
    "slugify",
]
