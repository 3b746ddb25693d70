"""Service configuration, read from environment variables.

Each section is its own BaseSettings with an env prefix (SCHEDULING_, STORE_,
REDIS_, DIRECTORY_) so sections never compete for the same variable names.

Usage:
    from iepsched.config import get_settings
    settings = get_settings()
    lookahead = settings.scheduling.max_lookahead_days
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_bool(v):
    if isinstance(v, str):
        return v.lower() in ("1", "true", "yes")
    return bool(v)


class SchedulingSettings(BaseSettings):
    """Availability search and RSVP policy configuration."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULING_", extra="ignore")

    max_lookahead_days: int = Field(
        default=90, ge=1, description="Longest date range an availability search may cover"
    )
    allow_revote: bool = Field(
        default=True, description="Let a member change a vote already cast on a proposal"
    )
    auto_adopt_unanimous: bool = Field(
        default=False,
        description="Move the meeting to a proposal once every invited member accepts it",
    )

    @field_validator("allow_revote", "auto_adopt_unanimous", mode="before")
    @classmethod
    def parse_flags(cls, v):
        return _parse_bool(v)


class StoreSettings(BaseSettings):
    """Meeting store configuration."""

    model_config = SettingsConfigDict(env_prefix="STORE_", extra="ignore")

    backend: Literal["memory", "redis"] = Field(default="memory", description="Meeting store backend")
    key_prefix: str = Field(default="iepsched", description="Redis key namespace")


class RedisSettings(BaseSettings):
    """Connection pool for the Redis meeting store (STORE_BACKEND=redis)."""

    model_config = SettingsConfigDict(env_prefix="REDIS_", extra="ignore")

    host: str = Field(default="redis", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: str = Field(default="", description="Redis password")
    max_connections: int = Field(default=50, description="Maximum pool connections")
    pool_timeout_sec: float = Field(default=5.0, description="Pool timeout in seconds")
    socket_timeout: float = Field(default=5.0, description="Socket timeout in seconds")
    socket_connect_timeout: float = Field(default=5.0, description="Socket connect timeout in seconds")


class DirectorySettings(BaseSettings):
    """Team directory configuration."""

    model_config = SettingsConfigDict(env_prefix="DIRECTORY_", extra="ignore")

    seed_path: str = Field(default="", description="JSON file with team members and blackouts")


class CorsSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    origins_raw: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )
    origins_regex: str = Field(
        default="",
        validation_alias="CORS_ORIGINS_REGEX",
        description="Regex pattern for origins",
    )

    @property
    def origins(self) -> list[str]:
        """CORS_ORIGINS is a comma-separated list."""
        return [o.strip() for o in self.origins_raw.split(",") if o.strip()]

    @property
    def allow_credentials(self) -> bool:
        """Browsers refuse credentials with a wildcard origin."""
        return self.origins != ["*"] and not self.origins_regex


class DebugSettings(BaseSettings):
    """REQUEST_DEBUG turns on the request log; REDIS_DEBUG turns up redis-py logging."""

    model_config = SettingsConfigDict(extra="ignore")

    request: bool = Field(default=False, alias="request_debug")
    redis: bool = Field(default=False, alias="redis_debug")

    @field_validator("*", mode="before")
    @classmethod
    def parse_bool(cls, v):
        return _parse_bool(v)


class Settings:
    """All configuration sections, each loaded with its own prefix."""

    def __init__(self) -> None:
        self.scheduling = SchedulingSettings()
        self.store = StoreSettings()
        self.redis = RedisSettings()
        self.directory = DirectorySettings()
        self.cors = CorsSettings()
        self.debug = DebugSettings()


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process; tests call clear_settings_cache()."""
    return Settings()


def clear_settings_cache() -> None:
    get_settings.cache_clear()
