"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the creator-iq application.

    All settings can be overridden via environment variables.
    Prefix is not used to allow standard env var names (e.g., REDIS_URL).
    Scoring-specific knobs live in ``creator_iq.scoring.config.ScoringConfig``.
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

    # Redis (score store)
    redis_url: RedisDsn = Field(default="redis://localhost:6379/0")

    # Neynar (Farcaster) API
    neynar_api_key: str | None = None
    neynar_base_url: str = "https://api.neynar.com/v2"
    neynar_post_limit: int = Field(default=100, ge=1, le=150)

    # HTTP behaviour for the social client
    http_timeout: float = Field(default=15.0, ge=1.0, le=120.0)
    max_http_retries: int = Field(default=2, ge=0, le=10)
    max_backoff_seconds: float = Field(default=10.0, ge=1.0, le=300.0)

    # Observability
    metrics_port: int = 8000

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def neynar_configured(self) -> bool:
        """Check if the Neynar API key is set."""
        return self.neynar_api_key is not None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
