"""Redis key-value cache client.

This module provides:
- An explicitly constructed client with a connect/close lifecycle
- Fail-soft get/set/delete/delete_pattern that degrade to miss/no-op
- A strict atomic counter primitive used by the attempt rate limiter
- Per-operation timeouts independent of the primary store
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import orjson
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from portfolio.observability.logging import get_logger


if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)

DEFAULT_OPERATION_TIMEOUT = 0.25

# EXPIRE ... NX in increment_window
MIN_SERVER_VERSION = (7, 0)


class CacheUnavailableError(Exception):
    """Raised by strict operations when the cache store cannot be reached."""


_CACHE_ERRORS = (RedisError, OSError, TimeoutError, CacheUnavailableError)


class CacheClient:
    """Uniform get/set-with-TTL/delete over a Redis store.

    The cache is never a source of truth: every soft operation swallows
    transport and store errors (logging them) so callers always fall back
    to the primary store. Only ``increment_window`` and ``ttl`` raise
    ``CacheUnavailableError``, leaving the fail-open decision to the caller.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
        max_connections: int = 20,
        client: Redis | None = None,
    ) -> None:
        """Initialize the cache client.

        Args:
            url: Redis URL used by ``connect``.
            timeout: Upper bound in seconds for any single cache operation.
            max_connections: Connection pool size.
            client: Pre-built Redis client; when given, ``connect`` only pings it.
        """
        self._url = url
        self._timeout = timeout
        self._max_connections = max_connections
        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = client

    @property
    def is_connected(self) -> bool:
        """True once a client exists, even if the server is currently down."""
        return self._redis is not None

    async def connect(self) -> None:
        """Create the connection pool and verify the server answers.

        The client and its pool are kept when the first ping fails; the
        pool reconnects on a later operation once the server is back.

        Raises:
            CacheUnavailableError: If the server cannot be reached.
        """
        if self._redis is None:
            if not self._url:
                msg = "No Redis URL configured for the cache client"
                raise CacheUnavailableError(msg)
            self._pool = ConnectionPool.from_url(
                self._url,
                max_connections=self._max_connections,
                decode_responses=False,
                socket_timeout=self._timeout,
                socket_connect_timeout=self._timeout,
            )
            self._redis = redis.Redis(connection_pool=self._pool)

        try:
            async with asyncio.timeout(self._timeout):
                await self._redis.ping()
        except _CACHE_ERRORS as exc:
            msg = "Could not connect to the cache store"
            raise CacheUnavailableError(msg) from exc

        logger.info("Cache client connected")
        await self._check_server_version()

    async def _check_server_version(self) -> None:
        """Log an error when the server predates EXPIRE NX (Redis 7.0)."""
        try:
            async with asyncio.timeout(self._timeout):
                info = await self._client().info("server")
        except _CACHE_ERRORS as exc:
            logger.warning("Could not read cache server version", error=repr(exc))
            return

        version = str(info.get("redis_version", ""))
        try:
            major_minor = tuple(int(part) for part in version.split(".")[:2])
        except ValueError:
            logger.warning("Unrecognized cache server version", version=version)
            return

        if major_minor < MIN_SERVER_VERSION:
            logger.error(
                "Cache server too old for attempt counters, login limits will "
                "fail open",
                version=version,
                required=".".join(map(str, MIN_SERVER_VERSION)),
            )

    async def close(self) -> None:
        """Close the client and its pool. Safe to call more than once."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    def _client(self) -> Redis:
        if self._redis is None:
            msg = "Cache client is not connected"
            raise CacheUnavailableError(msg)
        return self._redis

    async def ping(self) -> bool:
        """Return True when the store answers within the timeout."""
        try:
            async with asyncio.timeout(self._timeout):
                return bool(await self._client().ping())
        except _CACHE_ERRORS:
            return False

    # -------------------------------------------------------------------------
    # Fail-soft operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Get a cached value.

        Returns:
            The decoded value, or None when absent, undecodable, or the
            store is unavailable.
        """
        try:
            async with asyncio.timeout(self._timeout):
                raw = await self._client().get(key)
        except _CACHE_ERRORS as exc:
            logger.warning("Cache get failed", key=key, error=repr(exc))
            return None

        if raw is None:
            logger.debug("Cache miss", key=key)
            return None

        try:
            value = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning("Discarding undecodable cache entry", key=key)
            return None

        logger.debug("Cache hit", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store a JSON-serializable value with a TTL in seconds.

        Returns:
            True if stored, False on any failure.
        """
        try:
            payload = orjson.dumps(value)
        except TypeError:
            logger.exception("Cache value is not serializable", key=key)
            return False

        try:
            async with asyncio.timeout(self._timeout):
                await self._client().set(key, payload, ex=ttl)
        except _CACHE_ERRORS as exc:
            logger.warning("Cache set failed", key=key, error=repr(exc))
            return False

        logger.debug("Cached value", key=key, ttl=ttl)
        return True

    async def delete(self, *keys: str) -> int:
        """Delete keys in a single round trip.

        Deleting absent keys is a no-op.

        Returns:
            Number of keys removed (0 on failure).
        """
        if not keys:
            return 0
        try:
            async with asyncio.timeout(self._timeout):
                deleted = await self._client().delete(*keys)
        except _CACHE_ERRORS as exc:
            logger.warning("Cache delete failed", keys=list(keys), error=repr(exc))
            return 0
        return int(deleted)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern (SCAN, then one DEL).

        Returns:
            Number of keys removed (0 on failure).
        """
        try:
            async with asyncio.timeout(self._timeout):
                client = self._client()
                keys = [key async for key in client.scan_iter(match=pattern, count=100)]
                if not keys:
                    return 0
                deleted = await client.delete(*keys)
        except _CACHE_ERRORS as exc:
            logger.warning(
                "Cache delete by pattern failed", pattern=pattern, error=repr(exc)
            )
            return 0

        logger.debug("Deleted keys by pattern", pattern=pattern, count=deleted)
        return int(deleted)

    # -------------------------------------------------------------------------
    # Strict counter operations
    # -------------------------------------------------------------------------

    async def increment_window(self, key: str, window_seconds: int) -> tuple[int, int]:
        """Atomically increment a fixed-window counter.

        INCR, EXPIRE NX and TTL run in one MULTI/EXEC transaction, so two
        concurrent callers can never read the same count, and the expiry is
        only set when the window opens.

        Returns:
            Tuple of (count after increment, remaining TTL in seconds).

        Raises:
            CacheUnavailableError: On any store failure.
        """
        try:
            async with asyncio.timeout(self._timeout):
                async with self._client().pipeline(transaction=True) as pipe:
                    pipe.incr(key)
                    pipe.expire(key, window_seconds, nx=True)
                    pipe.ttl(key)
                    count, _, ttl = await pipe.execute()
        except CacheUnavailableError:
            raise
        except _CACHE_ERRORS as exc:
            msg = f"Counter increment failed for {key}"
            raise CacheUnavailableError(msg) from exc
        return int(count), int(ttl)

    async def ttl(self, key: str) -> int:
        """Remaining TTL: seconds, -1 without expiry, -2 when absent.

        Raises:
            CacheUnavailableError: On any store failure.
        """
        try:
            async with asyncio.timeout(self._timeout):
                return int(await self._client().ttl(key))
        except CacheUnavailableError:
            raise
        except _CACHE_ERRORS as exc:
            msg = f"TTL lookup failed for {key}"
            raise CacheUnavailableError(msg) from exc
