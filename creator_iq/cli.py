"""
Command-line interface for creator-iq.

Provides commands to score an account, inspect the extracted features,
drop a stored score, and run diagnostic checks.

Usage:
    creator-iq score 3              # Score fid 3
    creator-iq score 3 --json       # Print the full ScoreResult as JSON
    creator-iq features 3           # Print the FeatureReport
    creator-iq clear-cache 3        # Drop the stored score
    creator-iq health               # Check service health
"""

import asyncio
import json
import random
import sys
from typing import Any

import click

from creator_iq.config.settings import Settings, get_settings
from creator_iq.observability.logging import setup_logging
from creator_iq.observability.metrics import get_metrics


def _open_redis(settings: Settings) -> Any:
    """Create the async Redis client backing the score store."""
    import redis.asyncio as redis

    return redis.from_url(
        str(settings.redis_url),
        encoding="utf-8",
        decode_responses=True,
    )


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Creator IQ - cognitive scoring for Farcaster accounts."""
    setup_logging("DEBUG" if debug else None)


@main.command()
@click.argument("fid", type=int)
@click.option("--username", default=None, help="Farcaster username for the prompt")
@click.option("--x-handle", default=None, help="Verified X handle (skips the lookup)")
@click.option("--seed", default=None, type=int, help="Seed the heuristic jitter")
@click.option("--cache/--no-cache", default=True, help="Read and write the score store")
@click.option("--metrics/--no-metrics", default=False, help="Enable metrics server")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def score(
    fid: int,
    username: str | None,
    x_handle: str | None,
    seed: int | None,
    cache: bool,
    metrics: bool,
    as_json: bool,
) -> None:
    """Score one account by fid."""
    from creator_iq.ingestion.schemas import AccountMetadata, VerifiedAccount
    from creator_iq.scoring.errors import NoContentError
    from creator_iq.scoring.service import CreatorIQService
    from creator_iq.scoring.store import RedisScoreStore

    metadata = AccountMetadata(
        username=username,
        verified_accounts=(
            [VerifiedAccount(platform="x", username=x_handle)] if x_handle else None
        ),
    )

    async def run():
        if metrics:
            get_metrics().start_server()

        store = RedisScoreStore(_open_redis(get_settings())) if cache else None
        service = CreatorIQService(
            store=store,
            rng=random.Random(seed) if seed is not None else None,
        )
        try:
            return await service.score(fid, metadata)
        finally:
            await service.close()
            if store is not None:
                await store.close()

    try:
        result = asyncio.run(run())
    except NoContentError as e:
        click.echo(click.style(str(e), fg="red"), err=True)
        sys.exit(2)

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    click.echo(f"\nScore for fid {fid}:")
    click.echo("-" * 40)
    click.echo(f"  Score:      {result.score}")
    click.echo(f"  Confidence: {result.confidence}")
    click.echo(f"  Source:     {result.source.value}")
    click.echo(f"  Model:      {result.model_version or '-'}")
    click.echo("-" * 40)
    click.echo(result.analysis)


@main.command()
@click.argument("fid", type=int)
@click.option("--limit", default=None, type=int, help="Max posts to fetch")
def features(fid: int, limit: int | None) -> None:
    """Fetch an account's posts and print the extracted features."""
    from creator_iq.features.extractors import build_feature_report
    from creator_iq.ingestion.neynar_client import NeynarClient, SocialClientError

    async def run():
        async with NeynarClient() as client:
            return await client.fetch_posts(fid, limit=limit)

    try:
        posts = asyncio.run(run())
    except SocialClientError as e:
        click.echo(click.style(f"Post fetch failed ({e.kind}): {e}", fg="red"), err=True)
        sys.exit(1)

    if not posts:
        click.echo(click.style(f"No posts found for account {fid}", fg="red"), err=True)
        sys.exit(2)

    report = build_feature_report(posts)
    click.echo(json.dumps(report.model_dump(mode="json"), indent=2))


@main.command("clear-cache")
@click.argument("fid", type=int)
def clear_cache(fid: int) -> None:
    """Drop the stored score for an account."""
    from creator_iq.scoring.errors import StoreError
    from creator_iq.scoring.store import RedisScoreStore

    async def run():
        store = RedisScoreStore(_open_redis(get_settings()))
        try:
            return await store.clear(fid)
        finally:
            await store.close()

    try:
        deleted = asyncio.run(run())
    except StoreError as e:
        click.echo(click.style(f"Store unavailable: {e}", fg="red"), err=True)
        sys.exit(1)

    if deleted:
        click.echo(f"Cleared stored score for fid {fid}")
    else:
        click.echo(f"No stored score for fid {fid}")


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    import structlog
    logger = structlog.get_logger()

    from creator_iq.scoring.config import ScoringConfig

    async def check():
        results: dict[str, bool] = {}

        # Check Redis
        try:
            client = _open_redis(get_settings())
            results["redis"] = bool(await client.ping())
            await client.aclose()
        except Exception as e:
            results["redis"] = False
            logger.error("Redis health check failed", error=str(e))

        # Check credentials
        settings = get_settings()
        config = ScoringConfig()
        results["neynar_configured"] = settings.neynar_configured
        results["openai_configured"] = config.openai_configured
        results["anthropic_configured"] = config.anthropic_configured
        return results

    results = asyncio.run(check())

    click.echo("\nHealth Check Results:")
    click.echo("-" * 40)

    all_healthy = True
    for name, status in results.items():
        icon = "✓" if status else "✗"
        color = "green" if status else "red"
        click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
        if name in ("redis", "neynar_configured") and not status:
            all_healthy = False

    click.echo("-" * 40)

    if all_healthy:
        click.echo(click.style("All core services healthy!", fg="green"))
        sys.exit(0)
    else:
        click.echo(click.style("Some services unhealthy!", fg="red"))
        sys.exit(1)


if __name__ == "__main__":
    main()
