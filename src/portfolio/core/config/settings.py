"""Application configuration using Pydantic Settings with YAML support.

Configuration is organised in nested sections loaded from YAML files,
with secrets supplied through the environment only:
- YAML files under config/base/ merged with config/environments/{APP_ENV}/
- .env file and environment variables (nested delimiter ``__``)
- Computed connection URLs for Redis and PostgreSQL
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


THIRTY_DAYS = 60 * 60 * 24 * 30
THREE_DAYS = 60 * 60 * 24 * 3


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Portfolio Content Service"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 8000


class ApiSettings(BaseModel):
    """API configuration settings."""

    v1_prefix: str = "/api/v1"
    cors_origins: list[str] = []


class AuthSettings(BaseModel):
    """Bearer token verification settings."""

    algorithm: str = "HS256"
    admin_role: str = "admin"
    access_token_expire_minutes: int = 60
    issuer: str | None = None
    audience: str | None = None


class RedisSettings(BaseModel):
    """Redis connection settings."""

    host: str = "localhost"
    port: int = 6379
    user: str | None = None
    cache_db: int = 0
    rate_limit_db: int = 2
    max_connections: int = 20


class CacheSettings(BaseModel):
    """Content cache policy."""

    prefix: str = "portfolio"
    # Kept well under a direct store read so a stalled cache never slows reads.
    operation_timeout: float = Field(default=0.25, gt=0, lt=1)
    detail_ttl: int = THIRTY_DAYS
    list_ttl: int = THIRTY_DAYS


class AttemptLimitSettings(BaseModel):
    """Fixed-window attempt limit."""

    max_attempts: int = Field(default=5, ge=1)
    window_seconds: int = Field(default=THREE_DAYS, ge=1)


class RateLimitingSettings(BaseModel):
    """Rate limiting configuration."""

    enabled: bool = True
    default: str = "100/minute"
    login: AttemptLimitSettings = AttemptLimitSettings()
    admin_setup: AttemptLimitSettings = AttemptLimitSettings()


class DatabaseSettings(BaseModel):
    """PostgreSQL database configuration settings."""

    host: str = "localhost"
    port: int = 5432
    name: str = "portfolio"
    user: str | None = None
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: float = 10.0
    ssl: bool = False
    auto_migrate: bool = True


class ContentSettings(BaseModel):
    """Slug assignment and save retry policy."""

    slug_max_suffix: int = Field(default=100, ge=1)
    max_save_attempts: int = Field(default=3, ge=1)


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Priority (highest to lowest): init kwargs, environment variables,
    .env file, environment YAML, base YAML, code defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    auth: AuthSettings = AuthSettings()
    redis: RedisSettings = RedisSettings()
    cache: CacheSettings = CacheSettings()
    rate_limiting: RateLimitingSettings = RateLimitingSettings()
    database: DatabaseSettings = DatabaseSettings()
    content: ContentSettings = ContentSettings()
    logging: LoggingSettings = LoggingSettings()

    # Secrets (from .env only - never in YAML)
    JWT_SECRET_KEY: str = ""
    REDIS_PASSWORD: str = ""
    DATABASE_PASSWORD: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    def _build_redis_url(self, db: int) -> str:
        """Build a Redis URL, including ACL user and password when set."""
        auth_part = ""
        if self.redis.user and self.REDIS_PASSWORD:
            auth_part = f"{self.redis.user}:{self.REDIS_PASSWORD}@"
        elif self.REDIS_PASSWORD:
            auth_part = f":{self.REDIS_PASSWORD}@"
        elif self.redis.user:
            auth_part = f"{self.redis.user}@"

        return f"redis://{auth_part}{self.redis.host}:{self.redis.port}/{db}"

    @property
    def redis_cache_url(self) -> str:
        """Redis URL for the content cache and attempt counters."""
        return self._build_redis_url(self.redis.cache_db)

    @property
    def redis_rate_limit_url(self) -> str:
        """Redis URL for HTTP request throttling storage."""
        return self._build_redis_url(self.redis.rate_limit_db)

    @property
    def database_dsn(self) -> str:
        """PostgreSQL DSN: postgresql://[user[:password]@]host:port/name."""
        auth_part = ""
        if self.database.user and self.DATABASE_PASSWORD:
            auth_part = f"{self.database.user}:{self.DATABASE_PASSWORD}@"
        elif self.database.user:
            auth_part = f"{self.database.user}@"

        return (
            f"postgresql://{auth_part}{self.database.host}:"
            f"{self.database.port}/{self.database.name}"
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()


settings = get_settings()
