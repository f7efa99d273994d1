"""Score store: where computed results are persisted between runs.

The pipeline only needs read/write/clear keyed by account id, so any object
implementing ``ScoreStore`` works. ``RedisScoreStore`` stores the JSON dump of
a ``ScoreResult`` under ``{prefix}{account_id}``.

Freshness is decided by ``creator_iq.scoring.recency.is_fresh`` on
``computed_at``; the Redis TTL only garbage-collects long-stale rows.
"""

import json
import logging
from typing import Any, Protocol

from pydantic import ValidationError

from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.errors import StoreError
from creator_iq.scoring.schemas import ScoreResult

logger = logging.getLogger(__name__)


class ScoreStore(Protocol):
    """Persistence contract used by the orchestrator.

    Implementations should raise ``StoreError``, but the orchestrator treats
    any exception from ``read`` or ``write`` as a non-fatal store failure.
    """

    async def read(self, account_id: int) -> ScoreResult | None: ...

    async def write(self, account_id: int, result: ScoreResult) -> None: ...

    async def clear(self, account_id: int) -> bool: ...


class RedisScoreStore:
    """Async Redis implementation of ``ScoreStore``.

    Args:
        redis_client: ``redis.asyncio`` client created with ``decode_responses=True``.
        config: Scoring configuration (key prefix and TTL).
    """

    def __init__(self, redis_client: Any, config: ScoringConfig | None = None) -> None:
        self._redis = redis_client
        self._config = config or ScoringConfig()

    def _key(self, account_id: int) -> str:
        return f"{self._config.cache_key_prefix}{account_id}"

    async def read(self, account_id: int) -> ScoreResult | None:
        """Return the stored result, or None if absent.

        A row that no longer parses is treated as absent.

        Raises:
            StoreError: Redis is unreachable.
        """
        try:
            raw = await self._redis.get(self._key(account_id))
        except Exception as e:
            raise StoreError(f"Score read failed for {account_id}: {e}") from e

        if not raw:
            return None
        try:
            return ScoreResult(**json.loads(raw))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning("Discarding unreadable score row for %s: %s", account_id, e)
            return None

    async def write(self, account_id: int, result: ScoreResult) -> None:
        """Persist ``result`` with a TTL of twice the freshness window."""
        try:
            await self._redis.set(
                self._key(account_id),
                json.dumps(result.model_dump(mode="json")),
                ex=self._config.cache_ttl_seconds,
            )
        except Exception as e:
            raise StoreError(f"Score write failed for {account_id}: {e}") from e

    async def clear(self, account_id: int) -> bool:
        """Delete the stored result. Returns True if a row existed."""
        try:
            deleted = await self._redis.delete(self._key(account_id))
        except Exception as e:
            raise StoreError(f"Score clear failed for {account_id}: {e}") from e
        return bool(deleted)

    async def close(self) -> None:
        await self._redis.aclose()
