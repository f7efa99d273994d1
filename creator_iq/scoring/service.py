"""Cognitive-score orchestrator.

Runs one account through:
  1. Cache check (fresh stored result → returned with source=cached)
  2. Post fetch (empty → NoContentError) and feature extraction
  3. Tiers in order: authoritative lookup → OpenAI → Anthropic → heuristic
  4. Degraded fallback if no tier answered (only the heuristic faulting
     gets here with the default tier list)
  5. Store write (failure logged, result still returned)

The service holds no per-run state: everything a tier reads travels in a
``ScoringContext``. Multiple accounts can be scored concurrently. The only
state carried between runs is the optional provider circuit breakers
(``SCORING_CIRCUIT_BREAKER_ENABLED``), off by default.

Every log line of a run carries the ``account_id`` through structlog's
context variables.

Collaborators are optional constructor arguments; missing ones are created
lazily from configuration.
"""

import asyncio
import random
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any, Protocol

import structlog

from creator_iq.features.extractors import build_feature_report
from creator_iq.ingestion.neynar_client import NeynarClient, SocialClientError
from creator_iq.ingestion.schemas import AccountMetadata, Post, VerifiedAccount
from creator_iq.observability.logging import bind_context, unbind_context
from creator_iq.observability.metrics import get_metrics
from creator_iq.scoring.authority import AuthorityClient, IQCheckerClient
from creator_iq.scoring.circuit_breaker import ProviderCircuitBreaker
from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.errors import (
    CreatorIQError,
    NoContentError,
    ProviderMalformedError,
    ProviderTransportError,
    StoreError,
)
from creator_iq.scoring.heuristic import degraded_score
from creator_iq.scoring.llm_client import AnthropicProvider, LLMProvider, OpenAIProvider
from creator_iq.scoring.recency import is_fresh
from creator_iq.scoring.schemas import ScoreResult, ScoreSource, TierOutcome, TierStatus
from creator_iq.scoring.store import ScoreStore
from creator_iq.scoring.tiers import (
    AuthoritativeTier,
    HeuristicTier,
    ProviderTier,
    ScoringContext,
    Tier,
    build_sample_text,
)

logger = structlog.get_logger(__name__)


class SocialClient(Protocol):
    """Source of posts and verified accounts."""

    async def fetch_posts(self, account_id: int) -> list[Post]: ...

    async def fetch_verified_accounts(self, account_id: int) -> list[VerifiedAccount]: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreatorIQService:
    """Tiered cognitive scoring for Farcaster accounts.

    Methods:
      - ``score(account_id, metadata?)``: full pipeline
      - ``score_accounts_batch(requests)``: concurrent, per-account isolation
      - ``clear_cached(account_id)``: drop a stored result
      - ``get_stats()``: counters and circuit breaker states (if enabled)
      - ``close()``: cleanup

    Args:
        config: Scoring configuration. Defaults to ScoringConfig().
        social_client: Post/account source. Defaults to a NeynarClient.
        store: Score store. None disables caching.
        authority_client: Authoritative lookup. Defaults to IQCheckerClient.
        provider_a: First LLM provider. Defaults to OpenAIProvider.
        provider_b: Second LLM provider. Defaults to AnthropicProvider.
        tiers: Explicit tier list, replacing the default chain.
        rng: Jitter source. Defaults to ``random.SystemRandom()``.
        clock: Current-time source for the freshness check.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        social_client: SocialClient | None = None,
        store: ScoreStore | None = None,
        authority_client: AuthorityClient | None = None,
        provider_a: LLMProvider | None = None,
        provider_b: LLMProvider | None = None,
        tiers: Sequence[Tier] | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._config = config or ScoringConfig()
        self._social = social_client
        self._owned_social: NeynarClient | None = None
        self._store = store
        self._authority = authority_client
        self._owned_authority: IQCheckerClient | None = None
        self._provider_a = provider_a
        self._provider_b = provider_b
        self._tiers: list[Tier] | None = list(tiers) if tiers is not None else None
        self._rng = rng or random.SystemRandom()
        self._clock = clock
        self._metrics = get_metrics()
        self._stats: dict[str, int] = {
            "total_requests": 0,
            "cache_hits": 0,
            "no_content": 0,
            "degraded": 0,
            "store_errors": 0,
            "tier_errors": 0,
        }

    # ── Collaborators ────────────────────────────────────

    async def _get_social_client(self) -> SocialClient:
        """Lazy-initialize the Neynar client."""
        if self._social is None:
            self._owned_social = NeynarClient()
            await self._owned_social.__aenter__()
            self._social = self._owned_social
        return self._social

    def _get_authority_client(self) -> AuthorityClient:
        if self._authority is None:
            self._owned_authority = IQCheckerClient(self._config)
            self._authority = self._owned_authority
        return self._authority

    def _breaker(self, name: str) -> ProviderCircuitBreaker | None:
        if not self._config.circuit_breaker_enabled:
            return None
        return ProviderCircuitBreaker(
            name,
            failure_threshold=self._config.circuit_failure_threshold,
            recovery_timeout=self._config.circuit_recovery_timeout,
            counted=(ProviderTransportError, ProviderMalformedError),
        )

    def _get_tiers(self) -> list[Tier]:
        """Build the default chain on first use."""
        if self._tiers is None:
            provider_a = self._provider_a or OpenAIProvider(self._config)
            provider_b = self._provider_b or AnthropicProvider(self._config)
            self._provider_a, self._provider_b = provider_a, provider_b
            self._tiers = [
                AuthoritativeTier(self._get_authority_client(), self._config),
                ProviderTier(
                    provider_a,
                    ScoreSource.PROVIDER_A,
                    timeout=self._config.llm_timeout,
                    breaker=self._breaker(provider_a.name),
                ),
                ProviderTier(
                    provider_b,
                    ScoreSource.PROVIDER_B,
                    timeout=self._config.llm_timeout,
                    breaker=self._breaker(provider_b.name),
                ),
                HeuristicTier(),
            ]
        return self._tiers

    # ── Cache ────────────────────────────────────────────

    def _caching(self) -> bool:
        return self._config.cache_enabled and self._store is not None

    async def _get_cached(self, account_id: int) -> ScoreResult | None:
        if not self._caching():
            return None

        try:
            stored = await self._store.read(account_id)
        except Exception as e:
            self._stats["store_errors"] += 1
            self._metrics.record_store_error("read")
            logger.warning("Score store read failed, treating as miss", error=repr(e))
            return None

        if stored is None:
            self._metrics.record_store_lookup("miss")
            return None

        if not is_fresh(stored.computed_at, now=self._clock(), max_age=self._config.freshness_window):
            self._metrics.record_store_lookup("stale")
            logger.debug("Stored score is stale", computed_at=stored.computed_at.isoformat())
            return None

        self._metrics.record_store_lookup("hit")
        self._stats["cache_hits"] += 1
        return stored.model_copy(update={"source": ScoreSource.CACHED})

    async def _set_cached(self, account_id: int, result: ScoreResult) -> None:
        if not self._caching():
            return
        if result.source is ScoreSource.DEGRADED and not self._config.cache_degraded_results:
            return

        try:
            await self._store.write(account_id, result)
        except Exception as e:
            self._stats["store_errors"] += 1
            self._metrics.record_store_error("write")
            logger.warning("Score store write failed", error=repr(e))

    async def clear_cached(self, account_id: int) -> bool:
        """Drop the stored result for ``account_id``.

        Returns:
            True if a stored result existed.

        Raises:
            StoreError: The store could not be reached.
        """
        if self._store is None:
            return False
        try:
            return await self._store.clear(account_id)
        except StoreError:
            self._metrics.record_store_error("clear")
            raise

    # ── Inputs ───────────────────────────────────────────

    async def _fetch_posts(self, account_id: int) -> list[Post]:
        social = await self._get_social_client()
        try:
            return list(await social.fetch_posts(account_id))
        except SocialClientError as e:
            logger.warning("Post fetch failed", kind=e.kind, error=str(e))
            return []

    async def _resolve_metadata(
        self,
        account_id: int,
        metadata: AccountMetadata | None,
    ) -> AccountMetadata:
        """Fill in verified accounts when the caller did not supply them."""
        metadata = metadata or AccountMetadata()
        if metadata.verified_accounts is not None or not self._config.authority_enabled:
            return metadata

        social = await self._get_social_client()
        try:
            accounts = await social.fetch_verified_accounts(account_id)
        except SocialClientError as e:
            logger.info("Verified account lookup failed", kind=e.kind, error=str(e))
            accounts = []
        return metadata.model_copy(update={"verified_accounts": accounts})

    # ── Main Pipeline ────────────────────────────────────

    async def _run_tiers(self, context: ScoringContext) -> ScoreResult:
        for tier in self._get_tiers():
            started = time.perf_counter()
            try:
                outcome = await tier.attempt(context)
            except Exception as e:
                self._stats["tier_errors"] += 1
                logger.exception("Tier raised unexpectedly", tier=tier.name)
                outcome = TierOutcome.fail(f"unexpected {type(e).__name__}: {e}")

            self._metrics.record_tier(tier.name, outcome.status.value, time.perf_counter() - started)
            key = f"tier_{tier.name}_{outcome.status.value}"
            self._stats[key] = self._stats.get(key, 0) + 1

            if outcome.status is TierStatus.SUCCESS and outcome.result is not None:
                return outcome.result
            if outcome.status is TierStatus.FAIL:
                logger.warning("Tier failed", tier=tier.name, reason=outcome.reason)
            else:
                logger.debug("Tier skipped", tier=tier.name, reason=outcome.reason)

        self._stats["degraded"] += 1
        logger.error("No tier produced a score, using degraded fallback")
        return degraded_score(context.report.post_count, context.report.avg_likes, self._rng)

    async def score(
        self,
        account_id: int,
        metadata: AccountMetadata | None = None,
    ) -> ScoreResult:
        """Score one account.

        Args:
            account_id: Farcaster fid.
            metadata: Optional profile data already known to the caller.

        Returns:
            ScoreResult with score in [55, 145] and confidence in [0, 100].

        Raises:
            NoContentError: The account has no posts to analyze.
        """
        self._stats["total_requests"] += 1
        bind_context(account_id=account_id)
        try:
            return await self._score_account(account_id, metadata)
        finally:
            unbind_context("account_id")

    async def _score_account(
        self,
        account_id: int,
        metadata: AccountMetadata | None,
    ) -> ScoreResult:
        cached = await self._get_cached(account_id)
        if cached is not None:
            logger.info("Serving stored score", score=cached.score)
            self._metrics.record_score(cached.source.value)
            return cached

        posts = await self._fetch_posts(account_id)
        if not posts:
            self._stats["no_content"] += 1
            self._metrics.record_no_content()
            raise NoContentError(account_id)

        metadata = await self._resolve_metadata(account_id, metadata)
        context = ScoringContext(
            account_id=account_id,
            posts=posts,
            report=build_feature_report(posts),
            metadata=metadata,
            sample_text=build_sample_text(
                posts, self._config.prompt_max_posts, self._config.prompt_max_chars,
            ),
            rng=self._rng,
        )

        result = await self._run_tiers(context)
        logger.info(
            "Scored account",
            score=result.score,
            confidence=result.confidence,
            source=result.source.value,
            posts=len(posts),
        )

        await self._set_cached(account_id, result)
        self._metrics.record_score(result.source.value)
        return result

    # ── Batch Scoring ────────────────────────────────────

    async def score_accounts_batch(
        self,
        requests: Sequence[int | tuple[int, AccountMetadata | None]],
    ) -> list[ScoreResult | CreatorIQError]:
        """Score several accounts concurrently.

        Each account runs independently; a ``NoContentError`` (or any other
        pipeline error) is returned in that account's slot instead of
        aborting the batch.

        Returns:
            One entry per request, same order.
        """
        semaphore = asyncio.Semaphore(self._config.batch_concurrency)

        async def _one(request: int | tuple[int, AccountMetadata | None]) -> ScoreResult | CreatorIQError:
            account_id, metadata = request if isinstance(request, tuple) else (request, None)
            async with semaphore:
                try:
                    return await self.score(account_id, metadata)
                except CreatorIQError as e:
                    logger.info("Batch entry not scored", account_id=account_id, error=str(e))
                    return e

        return list(await asyncio.gather(*(_one(r) for r in requests)))

    # ── Stats & Cleanup ──────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return counters and, when breakers are enabled, their states."""
        circuits = {
            tier.name: tier.breaker.state.value
            for tier in (self._tiers or [])
            if isinstance(tier, ProviderTier) and tier.breaker is not None
        }
        return {**self._stats, "circuits": circuits}

    async def close(self) -> None:
        """Clean up clients this service created."""
        for provider in (self._provider_a, self._provider_b):
            if provider is not None:
                await provider.close()
        if self._owned_social is not None:
            await self._owned_social.close()
            self._owned_social = None
            self._social = None
        if self._owned_authority is not None:
            await self._owned_authority.close()
            self._owned_authority = None
            self._authority = None
