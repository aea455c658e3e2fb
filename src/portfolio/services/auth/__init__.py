"""Login guard package.

Provides brute-force protection around credential verification.
"""

from portfolio.services.auth.exceptions import (
    InvalidCredentialsError,
    LoginError,
    LoginRateLimitedError,
)
from portfolio.services.auth.service import (
    LoginAttemptDecision,
    LoginGuard,
    resolve_client_address,
)


__all__ = [
    "InvalidCredentialsError",
    "LoginAttemptDecision",
    "LoginError",
    "LoginGuard",
    "LoginRateLimitedError",
    "resolve_client_address",
]
