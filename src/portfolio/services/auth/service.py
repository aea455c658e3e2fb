"""Login attempt guard.

Callers gate credential checks with the fixed-window rate limiter:
1. ``check_login_attempt`` before verifying credentials
2. ``reset_login_attempts`` after a successful verification

``authenticate`` runs that sequence around a caller-supplied verifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from portfolio.observability.logging import get_logger
from portfolio.services.auth.exceptions import (
    InvalidCredentialsError,
    LoginRateLimitedError,
)


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from portfolio.cache.keys import CacheKeys
    from portfolio.cache.rate_limit import RateLimiter

logger = get_logger(__name__)

PrincipalT = TypeVar("PrincipalT")

UNKNOWN_CLIENT_ADDRESS = "unknown-ip"


def resolve_client_address(
    forwarded_for: str | None,
    real_ip: str | None,
    peer: str | None = None,
) -> str:
    """Pick the caller address: first X-Forwarded-For hop, X-Real-IP, peer."""
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return peer or UNKNOWN_CLIENT_ADDRESS


@dataclass(frozen=True, slots=True)
class LoginAttemptDecision:
    """Whether a login attempt may proceed, and for how long it is blocked."""

    allowed: bool
    retry_after_seconds: int | None = None


class LoginGuard:
    """Brute-force protection for credential checks and admin bootstrap."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        keys: CacheKeys,
        *,
        admin_setup_max_attempts: int | None = None,
        admin_setup_window_seconds: int | None = None,
    ) -> None:
        """Initialize the guard.

        Args:
            rate_limiter: Limiter configured with the login limits.
            keys: Key schema for the attempt counters.
            admin_setup_max_attempts: Override for the admin bootstrap limit.
            admin_setup_window_seconds: Override for the admin bootstrap window.
        """
        self._limiter = rate_limiter
        self._keys = keys
        self._admin_setup_max_attempts = admin_setup_max_attempts
        self._admin_setup_window_seconds = admin_setup_window_seconds

    async def check_login_attempt(
        self, identity: str, client_address: str
    ) -> LoginAttemptDecision:
        """Count a login attempt for the pair and decide if it may proceed."""
        result = await self._limiter.check_and_increment(
            self._keys.login_attempts(identity, client_address)
        )
        if not result.allowed:
            logger.warning(
                "Login attempt blocked",
                client_address=client_address,
                retry_after=result.reset_in_seconds,
            )
            return LoginAttemptDecision(
                allowed=False, retry_after_seconds=result.reset_in_seconds
            )
        return LoginAttemptDecision(allowed=True)

    async def reset_login_attempts(self, identity: str, client_address: str) -> None:
        await self._limiter.reset(self._keys.login_attempts(identity, client_address))

    async def authenticate(
        self,
        identity: str,
        client_address: str,
        verify: Callable[[], Awaitable[PrincipalT | None]],
    ) -> PrincipalT:
        """Verify credentials behind the attempt limiter.

        Args:
            identity: Claimed identity (e-mail).
            client_address: Resolved caller address.
            verify: Credential check returning the principal, or None.

        Raises:
            LoginRateLimitedError: If the pair is locked out. ``verify`` is
                not called.
            InvalidCredentialsError: If ``verify`` returned None.
        """
        decision = await self.check_login_attempt(identity, client_address)
        if not decision.allowed:
            raise LoginRateLimitedError(decision.retry_after_seconds)

        principal = await verify()
        if principal is None:
            raise InvalidCredentialsError

        await self.reset_login_attempts(identity, client_address)
        return principal

    async def check_admin_setup_attempt(
        self, client_address: str
    ) -> LoginAttemptDecision:
        """Count an admin bootstrap attempt from ``client_address``."""
        result = await self._limiter.check_and_increment(
            self._keys.admin_setup_attempts(client_address),
            max_attempts=self._admin_setup_max_attempts,
            window_seconds=self._admin_setup_window_seconds,
        )
        if not result.allowed:
            logger.warning(
                "Admin setup attempt blocked",
                client_address=client_address,
                retry_after=result.reset_in_seconds,
            )
        return LoginAttemptDecision(
            allowed=result.allowed,
            retry_after_seconds=None if result.allowed else result.reset_in_seconds,
        )
