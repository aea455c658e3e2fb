"""Banner service package."""

from portfolio.services.banners.service import BannerService


__all__ = ["BannerService"]
