"""
HTTP infrastructure layer with retry logic and API key rotation.

Provides:
- APIKeyRotator: Round-robin rotation over comma-separated API keys
- RetryConfig: Exponential backoff configuration
- HTTPClient: Async HTTP client with optional retry and key rotation

The social client uses a few retries. Scoring tiers build their clients with
``RetryConfig(max_retries=0)`` so that every tier is exactly one attempt.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class APIKeyRotator:
    """
    Round-robin API key rotation.

    The rotation index lives on the instance, so whoever owns the rotator owns
    the rotation state; nothing is shared at module level.

    Example:
        rotator = APIKeyRotator.from_env_var("key1,key2")
        key = await rotator.get_key()
    """

    keys: list[str]
    _current_index: int = field(default=0, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @classmethod
    def from_env_var(cls, value: str | None) -> "APIKeyRotator | None":
        """
        Create rotator from a comma-separated environment variable value.

        Returns:
            APIKeyRotator instance or None if no keys provided
        """
        if not value:
            return None

        keys = [k.strip() for k in value.split(",") if k.strip()]
        if not keys:
            return None

        return cls(keys=keys)

    async def get_key(self) -> str:
        """Get the next API key in round-robin rotation."""
        async with self._lock:
            key = self.keys[self._current_index]
            self._current_index = (self._current_index + 1) % len(self.keys)
            return key

    @property
    def key_count(self) -> int:
        """Return the number of available keys."""
        return len(self.keys)


@dataclass
class RetryConfig:
    """
    Exponential backoff configuration for HTTP retries.

    Formula: min(max_backoff, base_delay * 2^attempt) * (1 + random(0, jitter_factor))
    """

    max_retries: int = 3
    max_backoff_seconds: float = 60.0
    base_delay: float = 1.0
    jitter_factor: float = 0.1

    def calculate_backoff(self, attempt: int) -> float:
        """
        Calculate backoff duration for a given retry attempt.

        Args:
            attempt: The retry attempt number (0-indexed)

        Returns:
            Backoff duration in seconds with jitter applied
        """
        delay = min(self.base_delay * (2**attempt), self.max_backoff_seconds)
        return delay + delay * self.jitter_factor * random.random()

    def is_retryable_status(self, status_code: int) -> bool:
        """429 and the transient 5xx family are retried."""
        return status_code in RETRYABLE_STATUS_CODES


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    @property
    def is_not_found(self) -> bool:
        """True when the server answered 404."""
        return self.status_code == 404


class RateLimitError(HTTPClientError):
    """Raised when rate limit is hit and all retries exhausted."""


class HTTPClient:
    """
    Async HTTP client with retry logic and API key rotation.

    Features:
    - Exponential backoff with jitter on 429/5xx and transport errors
    - Optional API key injection per request header
    - Async context manager for resource cleanup

    Example:
        async with HTTPClient(RetryConfig(max_retries=0), timeout=10.0) as client:
            response = await client.get(url, headers={"accept": "application/json"})
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
    ):
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        """Enter async context manager, create client."""
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager, close client."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform GET request with retry logic."""
        return await self.request("GET", url, **kwargs)

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        api_key_rotator: APIKeyRotator | None = None,
        api_key_header: str | None = None,
    ) -> httpx.Response:
        """
        Execute an HTTP request, retrying transient failures.

        Every ``httpx.TransportError`` (timeouts, refused or dropped
        connections, protocol and proxy errors) is retried and, once retries
        run out, surfaces as ``HTTPClientError`` with no status code.

        Args:
            method: HTTP method
            url: Request URL
            params: Query parameters
            headers: Request headers
            api_key_rotator: Optional key rotator for authentication
            api_key_header: Header carrying the rotated API key

        Returns:
            httpx.Response with a status below 400

        Raises:
            HTTPClientError: On non-retryable errors or after retries exhausted
            RateLimitError: When rate limited and retries exhausted
        """
        if not self._client:
            raise RuntimeError("HTTPClient must be used as async context manager")

        attempts = self.retry_config.max_retries + 1

        for attempt in range(attempts):
            request_headers = dict(headers) if headers else {}
            if api_key_rotator and api_key_header:
                request_headers[api_key_header] = await api_key_rotator.get_key()

            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params,
                    headers=request_headers or None,
                )
            except httpx.TransportError as e:
                if attempt < attempts - 1:
                    backoff = self.retry_config.calculate_backoff(attempt)
                    logger.warning(
                        f"Retryable error {type(e).__name__} for {url}, "
                        f"attempt {attempt + 1}/{attempts}, backing off {backoff:.2f}s"
                    )
                    await asyncio.sleep(backoff)
                    continue
                raise HTTPClientError(
                    f"Request failed after {attempt + 1} attempts: {e}"
                ) from e

            if self.retry_config.is_retryable_status(response.status_code):
                if attempt < attempts - 1:
                    backoff = self.retry_config.calculate_backoff(attempt)
                    logger.warning(
                        f"Retryable status {response.status_code} from {url}, "
                        f"attempt {attempt + 1}/{attempts}, backing off {backoff:.2f}s"
                    )
                    await asyncio.sleep(backoff)
                    continue

                error_cls = RateLimitError if response.status_code == 429 else HTTPClientError
                raise error_cls(
                    f"Request failed with status {response.status_code} "
                    f"after {attempt + 1} attempts",
                    status_code=response.status_code,
                    response_body=response.text,
                )

            if response.status_code >= 400:
                raise HTTPClientError(
                    f"Request failed with status {response.status_code}",
                    status_code=response.status_code,
                    response_body=response.text,
                )

            return response

        # Unreachable: every iteration returns, continues or raises
        raise HTTPClientError(f"Request failed after {attempts} attempts")
