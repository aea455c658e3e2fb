"""Unit tests for the fixed-window attempt rate limiter.

Tests cover:
- Attempt counting and the allowed/denied boundary
- Fixed (non-sliding) window expiry
- Reset
- Fail-open behaviour when the counter store is down
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio.cache.client import CacheClient, CacheUnavailableError
from portfolio.cache.rate_limit import (
    FAIL_OPEN_ATTEMPTS_LEFT,
    RateLimiter,
    RateLimitResult,
)
from tests.fixtures.fakes import FakeRedis


pytestmark = pytest.mark.unit

WINDOW = 259200


class TestCheckAndIncrement:
    """Tests for RateLimiter.check_and_increment."""

    async def test_counts_down_then_denies(self, rate_limiter: RateLimiter) -> None:
        """Should allow five attempts with 4,3,2,1,0 left, then deny."""
        results = [await rate_limiter.check_and_increment("k") for _ in range(6)]

        assert [r.allowed for r in results] == [True] * 5 + [False]
        assert [r.attempts_left for r in results] == [4, 3, 2, 1, 0, 0]

    async def test_denied_attempts_stay_denied(self, rate_limiter: RateLimiter) -> None:
        """Should keep denying for the rest of the window."""
        for _ in range(5):
            await rate_limiter.check_and_increment("k")

        for _ in range(3):
            result = await rate_limiter.check_and_increment("k")
            assert result.allowed is False
            assert result.attempts_left == 0

    async def test_reports_remaining_window(
        self, rate_limiter: RateLimiter, fake_redis: FakeRedis
    ) -> None:
        """Should report seconds until the window opened by the first attempt ends."""
        first = await rate_limiter.check_and_increment("k")
        fake_redis.advance(3600)
        second = await rate_limiter.check_and_increment("k")

        assert first.reset_in_seconds == WINDOW
        assert second.reset_in_seconds == WINDOW - 3600

    async def test_window_does_not_slide(
        self, rate_limiter: RateLimiter, fake_redis: FakeRedis
    ) -> None:
        """Should reopen exactly one window after the first attempt."""
        for _ in range(6):
            await rate_limiter.check_and_increment("k")
            fake_redis.advance(60)

        fake_redis.advance(WINDOW - 6 * 60)
        result = await rate_limiter.check_and_increment("k")

        assert result == RateLimitResult(
            allowed=True, attempts_left=4, reset_in_seconds=WINDOW
        )

    async def test_keys_are_independent(self, rate_limiter: RateLimiter) -> None:
        """Should count each key separately."""
        for _ in range(6):
            await rate_limiter.check_and_increment("a")

        result = await rate_limiter.check_and_increment("b")

        assert result.allowed is True
        assert result.attempts_left == 4

    async def test_per_call_overrides(self, rate_limiter: RateLimiter) -> None:
        """Should honour per-call limit and window overrides."""
        first = await rate_limiter.check_and_increment(
            "k", max_attempts=1, window_seconds=60
        )
        second = await rate_limiter.check_and_increment(
            "k", max_attempts=1, window_seconds=60
        )

        assert first.allowed is True
        assert first.attempts_left == 0
        assert first.reset_in_seconds == 60
        assert second.allowed is False

    async def test_fails_open_when_store_down(
        self, rate_limiter: RateLimiter, fake_redis: FakeRedis
    ) -> None:
        """Should allow the attempt with a sentinel budget and no reset time."""
        fake_redis.down = True

        result = await rate_limiter.check_and_increment("k")

        assert result == RateLimitResult(
            allowed=True,
            attempts_left=FAIL_OPEN_ATTEMPTS_LEFT,
            reset_in_seconds=None,
        )

    async def test_enforces_limit_after_startup_outage(self) -> None:
        """Should deny the sixth attempt once Redis recovers from a failed connect."""
        fake = FakeRedis()
        fake.down = True
        client = CacheClient(client=fake)
        with pytest.raises(CacheUnavailableError):
            await client.connect()
        limiter = RateLimiter(client, max_attempts=5, window_seconds=WINDOW)

        during_outage = await limiter.check_and_increment("k")
        fake.down = False
        results = [await limiter.check_and_increment("k") for _ in range(6)]

        assert during_outage.reset_in_seconds is None
        assert [r.allowed for r in results] == [True] * 5 + [False]
        assert results[-1].reset_in_seconds == WINDOW

    async def test_fails_open_on_strict_client_error(self) -> None:
        """Should translate CacheUnavailableError into a fail-open result."""
        client = MagicMock(spec=CacheClient)
        client.increment_window = AsyncMock(side_effect=CacheUnavailableError("down"))
        limiter = RateLimiter(client)

        result = await limiter.check_and_increment("k")

        assert result.allowed is True
        assert result.reset_in_seconds is None

    async def test_falls_back_to_window_without_ttl(self) -> None:
        """Should report the full window if the store returns no TTL."""
        client = MagicMock(spec=CacheClient)
        client.increment_window = AsyncMock(return_value=(1, -1))
        limiter = RateLimiter(client, max_attempts=5, window_seconds=120)

        result = await limiter.check_and_increment("k")

        assert result.reset_in_seconds == 120


class TestReset:
    """Tests for RateLimiter.reset."""

    async def test_reset_returns_key_to_fresh(self, rate_limiter: RateLimiter) -> None:
        """Should give the full budget back after a reset."""
        for _ in range(6):
            await rate_limiter.check_and_increment("k")

        await rate_limiter.reset("k")
        result = await rate_limiter.check_and_increment("k")

        assert result.allowed is True
        assert result.attempts_left == 4

    async def test_reset_of_unknown_key_is_noop(
        self, rate_limiter: RateLimiter
    ) -> None:
        """Should tolerate resetting a key that was never counted."""
        await rate_limiter.reset("never-seen")

    async def test_reset_during_outage_does_not_raise(
        self, rate_limiter: RateLimiter, fake_redis: FakeRedis
    ) -> None:
        """Should swallow store errors on reset."""
        fake_redis.down = True

        await rate_limiter.reset("k")
