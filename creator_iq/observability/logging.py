"""
Structured logging configuration using structlog.

JSON lines in production, coloured console output elsewhere. Log records go
to stderr so ``creator-iq ... --json`` keeps stdout machine-readable.

A scoring run binds its ``account_id`` with ``bind_context`` and removes it
with ``unbind_context`` when the run ends; every line logged in between, from
any module, carries the id.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from creator_iq.config.settings import get_settings

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "asyncio")


def _renderer(production: bool) -> list[Processor]:
    if production:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def setup_logging(level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name. Defaults to ``Settings.log_level``.

    Usage:
        setup_logging("DEBUG")
        structlog.get_logger(__name__).info("Scored account", score=117)
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderer(settings.is_production),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name),
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """Attach key-value pairs to every later log line in this task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove keys previously attached with ``bind_context``."""
    structlog.contextvars.unbind_contextvars(*keys)
