"""Constants for the article service."""

from __future__ import annotations

from typing import Final


ARTICLES_NAMESPACE: Final[str] = "articles"
ARTICLE_RESOURCE: Final[str] = "Article"

# Concurrent creates racing for the same slug
DEFAULT_MAX_SAVE_ATTEMPTS: Final[int] = 3
