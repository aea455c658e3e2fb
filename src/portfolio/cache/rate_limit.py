"""Fixed-window attempt rate limiter on top of the cache client.

Per key the counter moves FRESH -> WITHIN_LIMIT -> EXCEEDED and returns to
FRESH only through ``reset`` or natural expiry of the window. The window
starts at the first increment and never slides.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from portfolio.cache.client import CacheUnavailableError
from portfolio.observability.logging import get_logger


if TYPE_CHECKING:
    from portfolio.cache.client import CacheClient

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW_SECONDS = 60 * 60 * 24 * 3

# Attempts reported when the counter store is down and the limiter fails open.
FAIL_OPEN_ATTEMPTS_LEFT = 1


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of one ``check_and_increment`` call.

    Attributes:
        allowed: Whether the attempt may proceed.
        attempts_left: Attempts remaining in the current window.
        reset_in_seconds: Seconds until the window closes; None when the
            limiter failed open and the window is unknown.
    """

    allowed: bool
    attempts_left: int
    reset_in_seconds: int | None


class RateLimiter:
    """Gates repeated actions per identifier with a fixed-window counter."""

    def __init__(
        self,
        cache_client: CacheClient,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ) -> None:
        self._cache = cache_client
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    async def check_and_increment(
        self,
        key: str,
        max_attempts: int | None = None,
        window_seconds: int | None = None,
    ) -> RateLimitResult:
        """Count one attempt against ``key`` and decide whether it is allowed.

        The increment and TTL read happen in one atomic round trip. A denied
        attempt still bumps the counter, which is harmless: the count only
        grows and the window expiry is never extended.

        Args:
            key: Full counter key.
            max_attempts: Override of the configured maximum.
            window_seconds: Override of the configured window length.

        Returns:
            The decision. Fails open (allowed, one attempt left) when the
            counter store is unavailable.
        """
        limit = max_attempts if max_attempts is not None else self.max_attempts
        window = window_seconds if window_seconds is not None else self.window_seconds

        try:
            count, ttl = await self._cache.increment_window(key, window)
        except CacheUnavailableError as exc:
            logger.warning(
                "Rate limiter store unavailable, failing open",
                key=key,
                error=str(exc),
            )
            return RateLimitResult(
                allowed=True,
                attempts_left=FAIL_OPEN_ATTEMPTS_LEFT,
                reset_in_seconds=None,
            )

        reset_in = ttl if ttl > 0 else window

        if count > limit:
            logger.info("Rate limit exceeded", key=key, count=count, limit=limit)
            return RateLimitResult(
                allowed=False,
                attempts_left=0,
                reset_in_seconds=reset_in,
            )

        return RateLimitResult(
            allowed=True,
            attempts_left=limit - count,
            reset_in_seconds=reset_in,
        )

    async def reset(self, key: str) -> None:
        """Delete the counter so the next attempt opens a fresh window."""
        await self._cache.delete(key)
