"""
Account and post schemas shared by the social client and the scoring core.

Posts are immutable once fetched. Every downstream extractor reads these
field names, so the Neynar client MUST map its payload onto them.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class Post(BaseModel):
    """A single cast with its engagement counters."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Raw post text")
    timestamp: datetime = Field(default_factory=_utc_now)
    like_count: int = Field(default=0, ge=0)
    recast_count: int = Field(default=0, ge=0)
    reply_count: int = Field(default=0, ge=0)

    @property
    def interactions(self) -> int:
        """Likes + recasts + replies."""
        return self.like_count + self.recast_count + self.reply_count

    @property
    def amplification(self) -> int:
        """Likes + recasts (replies excluded), used for the viral threshold."""
        return self.like_count + self.recast_count


class VerifiedAccount(BaseModel):
    """An external account linked to the Farcaster profile (e.g. an X handle)."""

    platform: str
    username: str


class AccountMetadata(BaseModel):
    """
    Optional profile data a caller already holds.

    ``verified_accounts=None`` means unknown, so the social client is asked;
    an empty list means the account is known to have none.
    """

    username: str | None = None
    display_name: str | None = None
    verified_accounts: list[VerifiedAccount] | None = None

    def account_on(self, platform: str) -> VerifiedAccount | None:
        """Return the first verified account on ``platform`` with a handle."""
        for account in self.verified_accounts or []:
            if account.platform.lower() == platform.lower() and account.username:
                return account
        return None
