"""Configuration for the cognitive-score pipeline.

Provides Pydantic settings for provider API keys, model selection, the
authoritative lookup, cache freshness, opt-in circuit breakers and per-tier
timeouts. All settings can be overridden via SCORING_* environment variables.
"""

from datetime import timedelta

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringConfig(BaseSettings):
    """Configuration for the tiered scoring pipeline.

    Settings can be overridden via environment variables prefixed with SCORING_.

    Example:
        SCORING_OPENAI_API_KEY=sk-...
        SCORING_ANTHROPIC_API_KEY=sk-ant-...
        SCORING_FRESHNESS_DAYS=14
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM API keys (absent key = tier skipped)
    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key for provider A",
    )
    anthropic_api_key: SecretStr | None = Field(
        default=None,
        description="Anthropic API key for provider B",
    )

    # Model selection
    openai_model: str = Field(default="gpt-4o-mini", description="Provider A model")
    anthropic_model: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Provider B model",
    )
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=1000, ge=64, le=8192)

    # Prompt assembly
    prompt_max_posts: int = Field(
        default=100,
        ge=1,
        description="Max raw posts quoted in the provider prompt",
    )
    prompt_max_chars: int = Field(
        default=12000,
        ge=500,
        description="Max characters of raw post text quoted in the prompt",
    )

    # Authoritative lookup
    authority_enabled: bool = Field(default=True)
    authority_platform: str = Field(
        default="x",
        description="Verified-account platform whose handle unlocks the lookup",
    )
    authority_base_url: str = Field(default="https://iq-checker.xyz")
    authority_default_confidence: int = Field(default=85, ge=0, le=100)
    authority_max_confidence: int = Field(
        default=85,
        ge=0,
        le=100,
        description="Cap on confidence reported by the unauthenticated lookup",
    )

    # Cache / recency gate
    cache_enabled: bool = Field(default=True, description="Read and write the score store")
    cache_key_prefix: str = Field(default="creator_iq:score:")
    freshness_days: int = Field(
        default=30,
        ge=0,
        description="Max age of a stored score still served from cache",
    )
    cache_degraded_results: bool = Field(
        default=False,
        description="Persist degraded (random) results to the store",
    )

    # Circuit breakers (opt-in; breaker state persists across invocations)
    circuit_breaker_enabled: bool = Field(
        default=False,
        description="Guard provider tiers with circuit breakers",
    )
    circuit_failure_threshold: int = Field(default=5, ge=1)
    circuit_recovery_timeout: float = Field(default=60.0, ge=5.0)

    # Timeouts
    llm_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=120.0,
        description="Timeout in seconds for one provider call",
    )
    authority_timeout: float = Field(default=10.0, ge=1.0, le=60.0)

    # Batch scoring
    batch_concurrency: int = Field(default=8, ge=1, le=128)

    @property
    def freshness_window(self) -> timedelta:
        """Freshness threshold as a timedelta."""
        return timedelta(days=self.freshness_days)

    @property
    def cache_ttl_seconds(self) -> int:
        """Redis TTL: twice the freshness window, at least one day."""
        return max(2 * self.freshness_days, 1) * 86400

    @property
    def openai_configured(self) -> bool:
        return self.openai_api_key is not None

    @property
    def anthropic_configured(self) -> bool:
        return self.anthropic_api_key is not None
