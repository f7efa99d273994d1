"""Freshness predicate for stored scores."""

from datetime import datetime, timedelta, timezone

DEFAULT_MAX_AGE = timedelta(days=30)
DEFAULT_MAX_SKEW = timedelta(minutes=5)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_fresh(
    computed_at: datetime,
    now: datetime | None = None,
    max_age: timedelta = DEFAULT_MAX_AGE,
    max_skew: timedelta = DEFAULT_MAX_SKEW,
) -> bool:
    """Return True iff ``-max_skew <= now - computed_at <= max_age``.

    Naive datetimes are read as UTC. A timestamp more than ``max_skew`` in the
    future is stale, so a corrupt or clock-skewed row is recomputed.
    """
    age = _as_utc(now or datetime.now(timezone.utc)) - _as_utc(computed_at)
    return -max_skew <= age <= max_age
