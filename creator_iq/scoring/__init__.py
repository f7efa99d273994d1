"""Tiered cognitive scoring for Farcaster accounts.

Tier chain: stored result → authoritative lookup → OpenAI → Anthropic →
local heuristic, with a low-confidence degraded score if the heuristic faults.
Every path returns a score in [55, 145] and a confidence in [0, 100].

Usage:
    from creator_iq.scoring import CreatorIQService

    service = CreatorIQService(store=RedisScoreStore(redis))
    result = await service.score(3)
    print(result.score, result.source)
"""

from creator_iq.scoring.circuit_breaker import CircuitOpenError, ProviderCircuitBreaker
from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.errors import (
    AuthorityError,
    CreatorIQError,
    NoContentError,
    ProviderError,
    ProviderMalformedError,
    ProviderTransportError,
    ProviderUnconfiguredError,
    StoreError,
)
from creator_iq.scoring.schemas import ScoreResult, ScoreSource, TierOutcome, TierStatus
from creator_iq.scoring.service import CreatorIQService
from creator_iq.scoring.store import RedisScoreStore, ScoreStore

__all__ = [
    "AuthorityError",
    "CircuitOpenError",
    "CreatorIQError",
    "CreatorIQService",
    "NoContentError",
    "ProviderCircuitBreaker",
    "ProviderError",
    "ProviderMalformedError",
    "ProviderTransportError",
    "ProviderUnconfiguredError",
    "RedisScoreStore",
    "ScoreResult",
    "ScoreSource",
    "ScoreStore",
    "ScoringConfig",
    "StoreError",
    "TierOutcome",
    "TierStatus",
]
