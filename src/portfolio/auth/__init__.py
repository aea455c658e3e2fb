"""Bearer token authentication for admin routes."""

from portfolio.auth.dependencies import (
    AdminUser,
    CurrentUser,
    OptionalUser,
    require_admin,
)
from portfolio.auth.jwt import (
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    create_access_token,
    decode_token,
)


__all__ = [
    "AdminUser",
    "CurrentUser",
    "OptionalUser",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "create_access_token",
    "decode_token",
    "require_admin",
]
