"""Unit tests for JWT token handling.

Tests cover:
- Token creation
- Token decoding and validation
- Token expiration
- Issuer / audience checks
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from freezegun import freeze_time
from jose import jwt

from portfolio.auth.jwt import (
    TokenExpiredError,
    TokenInvalidError,
    create_access_token,
    decode_token,
)
from portfolio.core.config import Settings


if TYPE_CHECKING:
    from collections.abc import Generator

pytestmark = pytest.mark.unit

SECRET = "test-secret-key-minimum-32-characters-long"


@pytest.fixture
def jwt_settings() -> Settings:
    """Settings for JWT testing."""
    return Settings(JWT_SECRET_KEY=SECRET)


@pytest.fixture(autouse=True)
def patch_settings(jwt_settings: Settings) -> Generator[None]:
    with patch("portfolio.auth.jwt.get_settings", return_value=jwt_settings):
        yield


class TestCreateAccessToken:
    """Tests for create_access_token."""

    def test_round_trips_subject_and_roles(self) -> None:
        token = create_access_token("admin-1", roles=["admin"])

        payload = decode_token(token)

        assert payload.sub == "admin-1"
        assert payload.roles == ["admin"]
        assert payload.iat is not None

    def test_uses_configured_lifetime(self) -> None:
        with freeze_time("2024-05-01 12:00:00"):
            token = create_access_token("admin-1")

        claims = jwt.get_unverified_claims(token)
        issued = datetime(2024, 5, 1, 12, tzinfo=UTC)
        assert claims["exp"] == int((issued + timedelta(minutes=60)).timestamp())

    def test_adds_issuer_and_audience(self, jwt_settings: Settings) -> None:
        jwt_settings.auth.issuer = "portfolio-auth"
        jwt_settings.auth.audience = "portfolio-api"

        claims = jwt.get_unverified_claims(create_access_token("admin-1"))

        assert claims["iss"] == "portfolio-auth"
        assert claims["aud"] == "portfolio-api"


class TestDecodeToken:
    """Tests for decode_token."""

    def test_expired_token(self) -> None:
        with freeze_time("2024-05-01 12:00:00"):
            token = create_access_token("admin-1", expires_delta=timedelta(minutes=5))

        with (
            freeze_time("2024-05-01 12:10:00"),
            pytest.raises(TokenExpiredError, match="expired"),
        ):
            decode_token(token)

    def test_wrong_signature(self) -> None:
        token = jwt.encode(
            {"sub": "admin-1", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            "another-secret",
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            decode_token(token)

    def test_garbage_token(self) -> None:
        with pytest.raises(TokenInvalidError, match="Invalid token"):
            decode_token("not-a-jwt")

    def test_missing_subject(self) -> None:
        token = jwt.encode(
            {"exp": datetime.now(UTC) + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            decode_token(token)

    def test_unconfigured_secret_rejects_everything(
        self, jwt_settings: Settings
    ) -> None:
        token = create_access_token("admin-1")
        jwt_settings.JWT_SECRET_KEY = ""

        with pytest.raises(TokenInvalidError, match="not configured"):
            decode_token(token)

    def test_wrong_audience(self, jwt_settings: Settings) -> None:
        jwt_settings.auth.audience = "other-api"
        token = create_access_token("admin-1")
        jwt_settings.auth.audience = "portfolio-api"

        with pytest.raises(TokenInvalidError):
            decode_token(token)
