"""Client for the authoritative external score lookup.

The lookup is keyed by a social handle (the account's verified X username)
and answers ``{"iqScore": <number>, "confidence": <number?>}``. It is an
unauthenticated third-party endpoint, so callers cap the confidence they
attach to its answer (see ``ScoringConfig.authority_max_confidence``).
"""

import logging
import math
from typing import Any, Protocol
from urllib.parse import quote

from creator_iq.ingestion.http_client import HTTPClient, HTTPClientError, RetryConfig
from creator_iq.scoring.config import ScoringConfig
from creator_iq.scoring.errors import AuthorityError
from creator_iq.scoring.schemas import AuthorityScore

logger = logging.getLogger(__name__)

SCORE_FIELDS = ("iqScore", "score")


class AuthorityClient(Protocol):
    async def lookup(self, handle: str) -> AuthorityScore: ...


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


class IQCheckerClient:
    """HTTP implementation of ``AuthorityClient``.

    One GET per lookup, no retries.

    Args:
        config: Scoring configuration (base URL and timeout).
        http_client: Pre-built HTTPClient; one is created lazily otherwise.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        http_client: HTTPClient | None = None,
    ) -> None:
        self._config = config or ScoringConfig()
        self._http = http_client
        self._owns_http = http_client is None

    async def _get_http(self) -> HTTPClient:
        if self._http is None:
            self._http = HTTPClient(
                retry_config=RetryConfig(max_retries=0),
                timeout=self._config.authority_timeout,
            )
            await self._http.__aenter__()
        return self._http

    async def lookup(self, handle: str) -> AuthorityScore:
        """Look up a score by handle.

        Raises:
            AuthorityError: kind="not_found" on 404 or a payload without a
                score, "transport" on network/HTTP failures, "malformed" on
                an unparseable body.
        """
        handle = handle.lstrip("@").strip()
        url = f"{self._config.authority_base_url.rstrip('/')}/api/iq/{quote(handle, safe='')}"

        http = await self._get_http()
        try:
            response = await http.get(url, headers={"accept": "application/json"})
        except HTTPClientError as e:
            kind = "not_found" if e.is_not_found else "transport"
            raise AuthorityError(f"lookup for @{handle} failed: {e}", kind=kind) from e

        try:
            data = response.json()
        except ValueError as e:
            raise AuthorityError(f"lookup for @{handle}: invalid JSON", kind="malformed") from e
        if not isinstance(data, dict):
            raise AuthorityError(f"lookup for @{handle}: unexpected payload", kind="malformed")

        score = next(
            (s for s in (_number(data.get(f)) for f in SCORE_FIELDS) if s is not None),
            None,
        )
        # A falsy score means the service has no rating for this handle
        if not score:
            raise AuthorityError(f"no score for @{handle}", kind="not_found")

        return AuthorityScore(score=score, confidence=_number(data.get("confidence")))

    async def close(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None
