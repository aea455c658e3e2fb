"""Article service package.

Provides article reads through the content cache and slug-assigning
mutations with synchronous cache invalidation.
"""

from portfolio.services.articles.service import ArticleService


__all__ = ["ArticleService"]
