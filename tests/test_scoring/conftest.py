"""Pytest fixtures for scoring tests."""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from creator_iq.features.extractors import build_feature_report
from creator_iq.features.schemas import FeatureReport
from creator_iq.ingestion.schemas import AccountMetadata, Post, VerifiedAccount
from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.schemas import AuthorityScore, ProviderScore
from creator_iq.scoring.tiers import ScoringContext


class MidpointRandom(random.Random):
    """RNG whose ``uniform`` always returns the midpoint (zero jitter)."""

    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2


class ExtremeRandom(random.Random):
    """RNG whose ``uniform`` always returns the upper bound."""

    def uniform(self, a: float, b: float) -> float:
        return b


@pytest.fixture
def scoring_config() -> ScoringConfig:
    """Test config with both providers keyed and short timeouts."""
    return ScoringConfig(
        openai_api_key="test-openai-key",
        anthropic_api_key="test-anthropic-key",
        cache_enabled=True,
        circuit_failure_threshold=3,
        circuit_recovery_timeout=5.0,
        llm_timeout=1.0,
        authority_timeout=1.0,
        authority_base_url="https://iq.test",
    )


@pytest.fixture
def zero_jitter() -> MidpointRandom:
    return MidpointRandom()


@pytest.fixture
def sample_report(sample_posts: list[Post]) -> FeatureReport:
    return build_feature_report(sample_posts)


@pytest.fixture
def x_metadata() -> AccountMetadata:
    """Metadata with a verified X handle."""
    return AccountMetadata(
        username="alice",
        display_name="Alice",
        verified_accounts=[VerifiedAccount(platform="x", username="alice_x")],
    )


@pytest.fixture
def scoring_context(sample_posts, sample_report, x_metadata, zero_jitter) -> ScoringContext:
    return ScoringContext(
        account_id=3,
        posts=sample_posts,
        report=sample_report,
        metadata=x_metadata,
        sample_text="\n\n".join(p.text for p in sample_posts),
        rng=zero_jitter,
    )


def make_provider(
    name: str = "openai",
    model: str = "gpt-4o-mini",
    configured: bool = True,
    result: ProviderScore | None = None,
    error: BaseException | None = None,
) -> MagicMock:
    """Mock LLMProvider."""
    provider = MagicMock()
    provider.name = name
    provider.model = model
    provider.configured = configured
    provider.score = AsyncMock(
        return_value=result or ProviderScore(score=118, analysis=f"{name} analysis", confidence=72),
        side_effect=error,
    )
    provider.close = AsyncMock()
    return provider


@pytest.fixture
def mock_social(sample_posts) -> AsyncMock:
    """Social client returning the sample posts and no verified accounts."""
    social = AsyncMock()
    social.fetch_posts = AsyncMock(return_value=sample_posts)
    social.fetch_verified_accounts = AsyncMock(return_value=[])
    return social


@pytest.fixture
def mock_authority() -> AsyncMock:
    authority = AsyncMock()
    authority.lookup = AsyncMock(return_value=AuthorityScore(score=131, confidence=None))
    return authority


@pytest.fixture
def mock_store() -> AsyncMock:
    """Empty score store."""
    store = AsyncMock()
    store.read = AsyncMock(return_value=None)
    store.write = AsyncMock(return_value=None)
    store.clear = AsyncMock(return_value=True)
    return store


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Async mock for Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis
