"""Constants for the banner service."""

from __future__ import annotations

from typing import Final


BANNERS_NAMESPACE: Final[str] = "banners"
BANNER_RESOURCE: Final[str] = "Banner"
