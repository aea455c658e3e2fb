"""JWT token handling.

Admin mutations are authorized by a bearer token signed with the shared
``JWT_SECRET_KEY`` (HS256 by default). Tokens are issued elsewhere;
``create_access_token`` exists for operators and tests.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel

from portfolio.core.config import get_settings
from portfolio.observability.logging import get_logger


logger = get_logger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload model."""

    sub: str  # Subject (user ID)
    exp: datetime
    iat: datetime | None = None
    roles: list[str] = []


class TokenError(Exception):
    """Base exception for token-related errors."""


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""


class TokenInvalidError(TokenError):
    """Raised when a token is invalid."""


def create_access_token(
    subject: str,
    *,
    roles: list[str] | None = None,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a signed access token.

    Args:
        subject: The subject of the token (typically user ID).
        roles: User roles, e.g. ``["admin"]``.
        expires_delta: Custom lifetime. If None, uses the configured default.
        extra_claims: Additional claims to include in the token.

    Returns:
        Encoded JWT token string.
    """
    settings = get_settings()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.auth.access_token_expire_minutes)

    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": subject,
        "exp": now + expires_delta,
        "iat": now,
        "roles": roles or [],
    }
    if settings.auth.issuer:
        payload["iss"] = settings.auth.issuer
    if settings.auth.audience:
        payload["aud"] = settings.auth.audience
    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(
        payload,
        settings.JWT_SECRET_KEY,
        algorithm=settings.auth.algorithm,
    )


def decode_token(token: str) -> TokenPayload:
    """Decode and validate a JWT token.

    Raises:
        TokenExpiredError: If the token has expired.
        TokenInvalidError: If the token is malformed, unsigned or mis-signed.
    """
    settings = get_settings()

    if not settings.JWT_SECRET_KEY:
        msg = "Token verification is not configured"
        raise TokenInvalidError(msg)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.auth.algorithm],
            audience=settings.auth.audience,
            issuer=settings.auth.issuer,
        )
        return TokenPayload(**payload)

    except ExpiredSignatureError as e:
        logger.debug("Token expired", error=str(e))
        msg = "Token has expired"
        raise TokenExpiredError(msg) from e

    except (JWTError, ValueError) as e:
        logger.warning("Invalid token", error=str(e))
        msg = "Invalid token"
        raise TokenInvalidError(msg) from e
