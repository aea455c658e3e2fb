"""Login guard exceptions."""

from __future__ import annotations

import math


class LoginError(Exception):
    """Base exception for login guard errors."""


class LoginRateLimitedError(LoginError):
    """Raised when an identity/address pair has exhausted its attempts."""

    def __init__(self, retry_after_seconds: int | None) -> None:
        self.retry_after_seconds = retry_after_seconds
        minutes = math.ceil((retry_after_seconds or 60) / 60)
        super().__init__(
            "Too many failed login attempts. "
            f"Please try again in {minutes} minutes."
        )


class InvalidCredentialsError(LoginError):
    """Raised when credential verification fails."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)
