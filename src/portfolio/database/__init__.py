"""PostgreSQL database layer.

This module provides:
- Connection pool management
- Schema bootstrap
- Repository classes implementing the content stores
"""

from portfolio.database.connection import (
    check_database_health,
    close_database_pool,
    get_database_pool,
    init_database_pool,
)
from portfolio.database.repositories import ArticleRepository, BannerRepository
from portfolio.database.schema import apply_schema


__all__ = [
    "ArticleRepository",
    "BannerRepository",
    "apply_schema",
    "check_database_health",
    "close_database_pool",
    "get_database_pool",
    "init_database_pool",
]
