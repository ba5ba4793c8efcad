"""Application configuration using Pydantic Settings with YAML support.

This module provides centralized configuration management with:
- YAML-based configuration files organized by domain
- Environment-specific overrides (test, development, production)
- Environment variable loading for secrets
- Validation of the token signing secret
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic import ValidationInfo
    from pydantic_settings import PydanticBaseSettingsSource


MIN_JWT_SECRET_LENGTH = 32


class CacheBackend(StrEnum):
    """Where cache-aside entries are stored."""

    MEMORY = "memory"
    REDIS = "redis"


class DatabaseBackend(StrEnum):
    """Where users, roles and permissions are persisted."""

    POSTGRES = "postgres"
    MEMORY = "memory"


def parse_list(v: str | list[str]) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "RBAC Service"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 8000


class ApiSettings(BaseModel):
    """API configuration settings."""

    v1_prefix: str = "/api/v1"
    cors_origins: Annotated[list[str], BeforeValidator(parse_list)] = []


class JwtSettings(BaseModel):
    """Access token settings."""

    algorithm: str = "HS256"
    access_token_expire_seconds: int = Field(default=3600, gt=0)
    min_secret_length: int = MIN_JWT_SECRET_LENGTH


class PasswordSettings(BaseModel):
    """Password hashing settings."""

    bcrypt_rounds: int = Field(default=10, ge=4, le=31)


class AuthSettings(BaseModel):
    """Authentication configuration settings."""

    jwt: JwtSettings = JwtSettings()
    password: PasswordSettings = PasswordSettings()


class CacheTtlSettings(BaseModel):
    """TTL tiers in seconds."""

    short: int = 60
    medium: int = 300
    long: int = 3600
    very_long: int = 86400


class CacheSettings(BaseModel):
    """Cache-aside store settings."""

    backend: CacheBackend = CacheBackend.MEMORY
    max_items: int = Field(default=1000, gt=0)
    namespace: str = "rbac"
    cascade_role_changes: bool = False
    ttl: CacheTtlSettings = CacheTtlSettings()


class RedisSettings(BaseModel):
    """Redis configuration settings."""

    host: str = "localhost"
    port: int = 6379
    user: str | None = None  # Redis ACL username (Redis 6.0+)
    cache_db: int = 0
    max_connections: int = 20


class DatabaseSettings(BaseModel):
    """PostgreSQL database configuration settings."""

    backend: DatabaseBackend = DatabaseBackend.POSTGRES
    host: str = "localhost"
    port: int = 5432
    name: str = "rbac"
    user: str | None = None
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: float = 30.0  # Query timeout in seconds
    ssl: bool = False


class SeedSettings(BaseModel):
    """Default data seeded at startup."""

    enabled: bool = True
    super_admin_email: str = "superadmin@system.com"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


class MetricsSettings(BaseModel):
    """Metrics configuration settings."""

    enabled: bool = True


class ObservabilitySettings(BaseModel):
    """Observability configuration settings."""

    metrics: MetricsSettings = MetricsSettings()


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Configuration is loaded from multiple sources with the following priority
    (highest to lowest):
    1. Values passed to Settings()
    2. Environment variables
    3. .env file (secrets only)
    4. Environment-specific YAML files (config/environments/{APP_ENV}/)
    5. Base YAML files (config/base/)
    6. Default values in code

    Environment variables can override any setting using the nested delimiter '__'.
    For example: CACHE__BACKEND=redis overrides cache.backend.
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
    cache: CacheSettings = CacheSettings()
    redis: RedisSettings = RedisSettings()
    database: DatabaseSettings = DatabaseSettings()
    seed: SeedSettings = SeedSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    # =========================================================================
    # Secrets (from environment / .env only - never in YAML)
    # =========================================================================
    JWT_SECRET_KEY: str = ""
    REDIS_PASSWORD: str = ""
    DATABASE_PASSWORD: str = ""
    SUPER_ADMIN_PASSWORD: str = ""

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def _check_secret_length(cls, value: str, info: ValidationInfo) -> str:
        """Reject signing secrets shorter than the configured minimum."""
        auth = info.data.get("auth")
        minimum = auth.jwt.min_secret_length if auth else MIN_JWT_SECRET_LENGTH
        if value and len(value) < minimum:
            msg = f"JWT_SECRET_KEY must be at least {minimum} characters long"
            raise ValueError(msg)
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the YAML source below environment variables and .env."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    # =========================================================================
    # Computed Fields
    # =========================================================================

    @property
    def redis_cache_url(self) -> str:
        """Build the Redis cache URL: redis://[user:password@]host:port/db."""
        auth_part = ""
        if self.redis.user and self.REDIS_PASSWORD:
            auth_part = f"{self.redis.user}:{self.REDIS_PASSWORD}@"
        elif self.REDIS_PASSWORD:
            auth_part = f":{self.REDIS_PASSWORD}@"
        elif self.redis.user:
            auth_part = f"{self.redis.user}@"

        return (
            f"redis://{auth_part}{self.redis.host}:{self.redis.port}"
            f"/{self.redis.cache_db}"
        )

    @property
    def database_url(self) -> str:
        """Build the PostgreSQL URL: postgresql://[user:password@]host:port/db."""
        auth_part = ""
        if self.database.user and self.DATABASE_PASSWORD:
            auth_part = f"{self.database.user}:{self.DATABASE_PASSWORD}@"
        elif self.database.user:
            auth_part = f"{self.database.user}@"

        return (
            f"postgresql://{auth_part}{self.database.host}:"
            f"{self.database.port}/{self.database.name}"
        )

    # =========================================================================
    # Environment Helpers
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_non_production(self) -> bool:
        """Check if running where docs and detailed errors may be exposed."""
        return self.APP_ENV in ("local", "test", "development")

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Using lru_cache ensures settings are only loaded once,
    improving performance and consistency.
    """
    return Settings()
