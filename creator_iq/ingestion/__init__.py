"""Data ingestion module - social client, HTTP layer, and schemas."""

from creator_iq.ingestion.neynar_client import NeynarClient, SocialClientError
from creator_iq.ingestion.schemas import AccountMetadata, Post, VerifiedAccount

__all__ = [
    "AccountMetadata",
    "NeynarClient",
    "Post",
    "SocialClientError",
    "VerifiedAccount",
]
