"""Pytest fixtures for creator-iq tests."""

from datetime import datetime, timedelta, timezone

import pytest

from creator_iq.config.settings import Settings
from creator_iq.ingestion.schemas import Post


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        redis_url="redis://localhost:6379/1",  # Use DB 1 for tests
        neynar_api_key="test-neynar-key",
        neynar_base_url="https://neynar.test/v2",
        max_http_retries=0,
    )


def make_post(
    text: str = "",
    likes: int = 0,
    recasts: int = 0,
    replies: int = 0,
    age_hours: int = 0,
) -> Post:
    """Build a Post with the given counters."""
    return Post(
        text=text,
        timestamp=datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc) - timedelta(hours=age_hours),
        like_count=likes,
        recast_count=recasts,
        reply_count=replies,
    )


@pytest.fixture
def sample_posts() -> list[Post]:
    """A small, varied post set."""
    return [
        make_post(
            "Just shipped a new Python library for parsing onchain data. "
            "Feedback welcome! https://github.com/example/lib",
            likes=42, recasts=8, replies=5,
        ),
        make_post("What is everyone reading this week? Looking for a good book.", likes=7, replies=3),
        make_post("gm @dwr 😂", likes=2, age_hours=4),
        make_post(
            "The market keeps rewarding teams that invest in research. "
            "Long thread on crypto economics soon #ethereum",
            likes=60, recasts=12, replies=9, age_hours=8,
        ),
        make_post("Morning run, then coffee and poetry.", likes=3, age_hours=12),
    ]


@pytest.fixture
def uniform_posts() -> list[Post]:
    """Ten 80-character posts with five interactions each; only the first asks a question."""
    body = "Thinking about how small teams build durable products over many years of effort"
    return [
        make_post(body.ljust(79) + ("?" if i == 0 else "."), likes=3, recasts=1, replies=1)
        for i in range(10)
    ]
