"""Environment-driven configuration for the feed API, CLI and adapters."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Every field maps to an unprefixed environment variable of the same name
    (MASTODON_ACCESS_TOKEN, CORS_ORIGINS, ...), optionally read from .env.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # JSONPlaceholder source
    jsonplaceholder_base_url: str = "https://jsonplaceholder.typicode.com"
    jsonplaceholder_cache_ttl_seconds: float = Field(default=300.0, ge=0.0)

    # Mastodon source
    mastodon_instance: str = "mastodon.social"
    mastodon_access_token: str | None = None
    mastodon_cache_ttl_seconds: float = Field(default=120.0, ge=0.0)
    mastodon_timeline_limit: int = Field(default=40, ge=1, le=40)

    # External API base URL (used by the HTTP bookmark store and CLI)
    api_base_url: str = "http://localhost:8000"

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "*"
    cors_allow_credentials: bool = False
    request_timeout_seconds: float = Field(default=30.0, ge=0.0)

    # Upstream HTTP
    http_timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_http_retries: int = Field(default=3, ge=0, le=10)
    max_backoff_seconds: float = Field(default=60.0, ge=1.0, le=300.0)

    # Observability
    metrics_port: int = 9000

    # Client state persistence
    state_file: str = ".social_feed_state.json"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def mastodon_configured(self) -> bool:
        return bool(self.mastodon_access_token)


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process; tests reset with get_settings.cache_clear()."""
    return Settings()
