"""Database repositories."""

from portfolio.database.repositories.articles import ArticleRepository
from portfolio.database.repositories.banners import BannerRepository


__all__ = ["ArticleRepository", "BannerRepository"]
