"""Redis-backed cache layer.

This module provides:
- CacheClient: fail-soft key-value cache with an atomic window counter
- CacheKeys: the key schema for content and attempt counters
- RateLimiter: fixed-window attempt limiter
"""

from portfolio.cache.client import CacheClient, CacheUnavailableError
from portfolio.cache.keys import CacheKeys
from portfolio.cache.rate_limit import RateLimiter, RateLimitResult


__all__ = [
    "CacheClient",
    "CacheKeys",
    "CacheUnavailableError",
    "RateLimitResult",
    "RateLimiter",
]
