"""
Neynar (Farcaster) API client.

Fetches an account's recent casts and its verified external accounts and maps
them onto the ``Post`` / ``VerifiedAccount`` schemas. Network behaviour
(timeouts, retries, key rotation) is delegated to ``HTTPClient``.

Errors are reported as ``SocialClientError`` with ``kind`` set to
``"not_found"`` (404 or unknown fid) or ``"transport"`` (anything else).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import ValidationError

from creator_iq.config.settings import Settings, get_settings
from creator_iq.ingestion.http_client import (
    APIKeyRotator,
    HTTPClient,
    HTTPClientError,
    RetryConfig,
)
from creator_iq.ingestion.schemas import Post, VerifiedAccount

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


class SocialClientError(Exception):
    """Raised when the social network cannot answer a request."""

    def __init__(self, message: str, kind: Literal["not_found", "transport"] = "transport"):
        super().__init__(message)
        self.kind = kind


def _parse_timestamp(value: Any) -> datetime:
    """Parse Neynar ISO timestamps ("2024-05-01T12:00:00.000Z")."""
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable cast timestamp %r", value)
    return datetime.now(timezone.utc)


def cast_to_post(cast: dict[str, Any]) -> Post:
    """
    Map one Neynar cast object onto a ``Post``.

    Missing counters default to zero; the text defaults to an empty string.
    """
    reactions = cast.get("reactions") or {}
    replies = cast.get("replies") or {}
    return Post(
        text=cast.get("text") or "",
        timestamp=_parse_timestamp(cast.get("timestamp")),
        like_count=int(reactions.get("likes_count") or 0),
        recast_count=int(reactions.get("recasts_count") or 0),
        reply_count=int(replies.get("count") or 0),
    )


class NeynarClient:
    """
    Async client for the Neynar v2 API.

    Usage:
        async with NeynarClient() as client:
            posts = await client.fetch_posts(3)
            accounts = await client.fetch_verified_accounts(3)

    Args:
        settings: Application settings. Defaults to get_settings().
        http_client: Pre-built HTTPClient (tests). Built from settings otherwise.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: HTTPClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_http = http_client is None
        self._http = http_client or HTTPClient(
            retry_config=RetryConfig(
                max_retries=self._settings.max_http_retries,
                max_backoff_seconds=self._settings.max_backoff_seconds,
            ),
            timeout=self._settings.http_timeout,
        )
        self._rotator = APIKeyRotator.from_env_var(self._settings.neynar_api_key)
        self._base_url = self._settings.neynar_base_url.rstrip("/")

    async def __aenter__(self) -> "NeynarClient":
        if self._owns_http:
            await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the owned HTTP client."""
        if self._owns_http:
            await self._http.close()

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        if self._rotator is None:
            raise SocialClientError("NEYNAR_API_KEY is not configured")

        try:
            response = await self._http.get(
                f"{self._base_url}{path}",
                params=params,
                headers={"accept": "application/json"},
                api_key_rotator=self._rotator,
                api_key_header=API_KEY_HEADER,
            )
        except HTTPClientError as e:
            kind = "not_found" if e.is_not_found else "transport"
            raise SocialClientError(f"Neynar {path} failed: {e}", kind=kind) from e

        try:
            data = response.json()
        except ValueError as e:
            raise SocialClientError(f"Neynar {path} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise SocialClientError(f"Neynar {path} returned unexpected payload")
        return data

    async def fetch_posts(self, account_id: int, limit: int | None = None) -> list[Post]:
        """
        Fetch the account's most recent casts.

        Args:
            account_id: Farcaster fid.
            limit: Max casts (defaults to settings.neynar_post_limit).

        Returns:
            Posts in the order Neynar returns them (newest first).

        Raises:
            SocialClientError: On 404 (kind="not_found") or any other failure.
        """
        data = await self._get_json(
            "/farcaster/feed/user/casts",
            {"fid": account_id, "limit": limit or self._settings.neynar_post_limit},
        )

        posts: list[Post] = []
        for cast in data.get("casts") or []:
            try:
                posts.append(cast_to_post(cast))
            except (ValidationError, TypeError, ValueError) as e:
                logger.debug("Skipping malformed cast for fid %s: %s", account_id, e)
        return posts

    async def fetch_verified_accounts(self, account_id: int) -> list[VerifiedAccount]:
        """
        Fetch the external accounts verified on the Farcaster profile.

        Raises:
            SocialClientError: When the user is unknown or the call fails.
        """
        data = await self._get_json("/farcaster/user/bulk", {"fids": str(account_id)})

        users = data.get("users") or []
        if not users:
            raise SocialClientError(f"fid {account_id} not found", kind="not_found")

        accounts: list[VerifiedAccount] = []
        for raw in users[0].get("verified_accounts") or []:
            platform = raw.get("platform")
            username = raw.get("username")
            if platform and username:
                accounts.append(VerifiedAccount(platform=platform, username=username))
        return accounts
