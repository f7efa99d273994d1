"""Error taxonomy for the scoring pipeline.

Only ``NoContentError`` ever reaches the caller of ``CreatorIQService.score``.
Provider and authority errors make their tier fail or skip; store errors are
logged and swallowed by the orchestrator.
"""

from typing import Literal


class CreatorIQError(Exception):
    """Base class for pipeline errors."""


class NoContentError(CreatorIQError):
    """The account has no posts to analyze; no score is fabricated."""

    def __init__(self, account_id: int | str):
        super().__init__(f"No posts found for account {account_id}")
        self.account_id = account_id


class ProviderError(CreatorIQError):
    """Base class for LLM provider failures."""


class ProviderUnconfiguredError(ProviderError):
    """No credential configured; the tier is skipped."""


class ProviderTransportError(ProviderError):
    """Network failure, non-2xx response, or timeout."""


class ProviderMalformedError(ProviderError):
    """Response missing required fields or failing numeric validation."""


class AuthorityError(CreatorIQError):
    """Authoritative lookup failure."""

    def __init__(
        self,
        message: str,
        kind: Literal["not_found", "transport", "malformed"] = "transport",
    ):
        super().__init__(message)
        self.kind = kind


class StoreError(CreatorIQError):
    """Score store read/write failure."""
