"""FastAPI security dependencies for admin-only routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from portfolio.auth.jwt import TokenExpiredError, TokenInvalidError, decode_token
from portfolio.core.config import get_settings
from portfolio.core.exceptions import ForbiddenException, UnauthorizedException


bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="Admin JWT bearer token",
    auto_error=False,
)


class CurrentUser(BaseModel):
    """The authenticated caller, built from the token payload."""

    id: str
    roles: list[str] = []

    def has_role(self, role: str) -> bool:
        return role in self.roles


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> CurrentUser:
    """Validate the bearer token and return the caller.

    Raises:
        UnauthorizedException: If the token is missing, expired or invalid.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
    except TokenExpiredError:
        raise UnauthorizedException("Token has expired") from None
    except TokenInvalidError as e:
        raise UnauthorizedException(str(e)) from None

    return CurrentUser(id=payload.sub, roles=payload.roles)


async def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> CurrentUser | None:
    """Like ``get_current_user`` but returns None when no token is sent."""
    if credentials is None or not credentials.credentials:
        return None
    return await get_current_user(credentials)


async def require_admin(
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Allow only callers carrying the configured admin role.

    Raises:
        ForbiddenException: If the caller is not an admin.
    """
    if not user.has_role(get_settings().auth.admin_role):
        raise ForbiddenException("Admin role required")
    return user


AdminUser = Annotated[CurrentUser, Depends(require_admin)]
OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
