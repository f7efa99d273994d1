"""Scoring tiers and their uniform attempt contract.

Each tier exposes ``name`` and ``async attempt(context) -> TierOutcome``:

  - ``success``: the tier produced a ``ScoreResult``; the chain stops.
  - ``skip``: the tier does not apply (no credential, no verified handle,
    open circuit); the next tier runs.
  - ``fail``: the tier applied but could not answer (transport, timeout,
    malformed payload); the next tier runs.

Tiers never retry. Network tiers bound their single call with
``asyncio.wait_for``; a timeout is a transport failure. Cancellation is not
caught anywhere, so cancelling a scoring run aborts the in-flight call.
"""

import asyncio
import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from creator_iq.features.schemas import FeatureReport
from creator_iq.ingestion.schemas import AccountMetadata, Post
from creator_iq.scoring.authority import AuthorityClient
from creator_iq.scoring.circuit_breaker import CircuitOpenError, ProviderCircuitBreaker
from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.errors import (
    AuthorityError,
    ProviderMalformedError,
    ProviderTransportError,
    ProviderUnconfiguredError,
)
from creator_iq.scoring.heuristic import heuristic_score
from creator_iq.scoring.llm_client import LLMProvider
from creator_iq.scoring.schemas import (
    ProviderScore,
    ScoreResult,
    ScoreSource,
    TierOutcome,
)

logger = logging.getLogger(__name__)

AUTHORITY_VERSION = "iq-checker"


@dataclass(frozen=True)
class ScoringContext:
    """Everything a tier may read for one scoring run."""

    account_id: int
    posts: Sequence[Post]
    report: FeatureReport
    metadata: AccountMetadata
    sample_text: str
    rng: random.Random


class Tier(Protocol):
    name: str

    async def attempt(self, context: ScoringContext) -> TierOutcome: ...


def build_sample_text(posts: Sequence[Post], max_posts: int, max_chars: int) -> str:
    """Join the first ``max_posts`` post texts, truncated to ``max_chars``."""
    text = "\n\n".join(p.text for p in posts[:max_posts] if p.text)
    if len(text) > max_chars:
        text = text[:max_chars].rstrip() + " …"
    return text


class AuthoritativeTier:
    """Lookup keyed by the account's verified handle on the configured platform."""

    name = "authoritative"

    def __init__(self, client: AuthorityClient, config: ScoringConfig) -> None:
        self._client = client
        self._config = config

    async def attempt(self, context: ScoringContext) -> TierOutcome:
        if not self._config.authority_enabled:
            return TierOutcome.skip("disabled")

        account = context.metadata.account_on(self._config.authority_platform)
        if account is None:
            return TierOutcome.skip(f"no verified {self._config.authority_platform} account")

        try:
            found = await asyncio.wait_for(
                self._client.lookup(account.username),
                timeout=self._config.authority_timeout,
            )
        except TimeoutError:
            return TierOutcome.fail(f"timeout after {self._config.authority_timeout}s")
        except AuthorityError as e:
            return TierOutcome.fail(f"{e.kind}: {e}")

        confidence = (
            found.confidence
            if found.confidence is not None
            else self._config.authority_default_confidence
        )
        confidence = min(confidence, self._config.authority_max_confidence)

        return TierOutcome.success(
            ScoreResult(
                score=found.score,
                confidence=confidence,
                analysis=(
                    f"IQ score fetched from verified {self._config.authority_platform.upper()} "
                    f"account (@{account.username}). This score is based on analysis of the "
                    f"user's profile and activity patterns on that platform."
                ),
                source=ScoreSource.AUTHORITATIVE,
                model_version=AUTHORITY_VERSION,
            )
        )


class ProviderTier:
    """One LLM provider behind a timeout and, optionally, a circuit breaker.

    Without a breaker every invocation calls a configured provider; with one,
    an open circuit turns the tier into a skip.
    """

    def __init__(
        self,
        provider: LLMProvider,
        source: ScoreSource,
        timeout: float,
        breaker: ProviderCircuitBreaker | None = None,
    ) -> None:
        self.name = source.value
        self._provider = provider
        self._source = source
        self._timeout = timeout
        self.breaker = breaker

    async def _score_once(self, context: ScoringContext) -> ProviderScore:
        try:
            return await asyncio.wait_for(
                self._provider.score(context.report, context.sample_text, context.metadata),
                timeout=self._timeout,
            )
        except TimeoutError as e:
            raise ProviderTransportError(
                f"{self._provider.name}: no response within {self._timeout}s"
            ) from e

    async def attempt(self, context: ScoringContext) -> TierOutcome:
        if not self._provider.configured:
            return TierOutcome.skip(f"{self._provider.name} unconfigured")

        try:
            if self.breaker is None:
                payload = await self._score_once(context)
            else:
                payload = await self.breaker.call(self._score_once, context)
        except CircuitOpenError as e:
            return TierOutcome.skip(str(e))
        except ProviderUnconfiguredError as e:
            return TierOutcome.skip(str(e))
        except (ProviderTransportError, ProviderMalformedError) as e:
            return TierOutcome.fail(str(e))

        return TierOutcome.success(
            ScoreResult(
                score=payload.score,
                analysis=payload.analysis,
                confidence=payload.confidence,
                source=self._source,
                model_version=self._provider.model,
            )
        )


class HeuristicTier:
    """Deterministic local composite; always answers unless it faults."""

    name = "heuristic"

    async def attempt(self, context: ScoringContext) -> TierOutcome:
        return TierOutcome.success(heuristic_score(context.report, context.rng))
