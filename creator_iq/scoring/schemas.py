"""Data models for the cognitive-score pipeline.

Defines the result returned by every tier, the payload shape expected from the
LLM providers and the authoritative lookup, and the tier outcome contract.

Bounds are enforced by validators on ``ScoreResult`` itself, so no code path
can construct an out-of-range score.
"""

import enum
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

SCORE_MIN = 55
SCORE_MAX = 145
CONFIDENCE_MIN = 0
CONFIDENCE_MAX = 100


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (``round()`` rounds to even)."""
    if not math.isfinite(value):
        raise ValueError(f"non-finite value: {value}")
    return math.floor(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_score(value: float) -> int:
    """Round and clamp into the 55-145 scale."""
    return int(clamp(round_half_up(value), SCORE_MIN, SCORE_MAX))


def clamp_confidence(value: float) -> int:
    """Round and clamp into 0-100."""
    return int(clamp(round_half_up(value), CONFIDENCE_MIN, CONFIDENCE_MAX))


class ScoreSource(str, enum.Enum):
    """Which tier produced a result."""

    CACHED = "cached"
    AUTHORITATIVE = "authoritative"
    PROVIDER_A = "provider_a"
    PROVIDER_B = "provider_b"
    HEURISTIC = "heuristic"
    DEGRADED = "degraded"


class ScoreResult(BaseModel):
    """Bounded cognitive score returned to the caller.

    ``score`` and ``confidence`` are rounded and clamped on construction.
    """

    score: int = Field(ge=SCORE_MIN, le=SCORE_MAX)
    analysis: str = ""
    confidence: int = Field(ge=CONFIDENCE_MIN, le=CONFIDENCE_MAX)
    source: ScoreSource
    computed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    model_version: str = Field(default="", description="Model or rule set that produced this")

    @field_validator("score", mode="before")
    @classmethod
    def _bound_score(cls, value: float) -> int:
        return clamp_score(float(value))

    @field_validator("confidence", mode="before")
    @classmethod
    def _bound_confidence(cls, value: float) -> int:
        return clamp_confidence(float(value))

    @field_validator("computed_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ProviderScore(BaseModel):
    """Validated payload from an LLM provider (raw, before clamping)."""

    score: float
    analysis: str = Field(min_length=1)
    confidence: float


class AuthorityScore(BaseModel):
    """Validated payload from the authoritative lookup."""

    score: float
    confidence: float | None = None


class TierStatus(str, enum.Enum):
    SUCCESS = "success"
    SKIP = "skip"
    FAIL = "fail"


@dataclass(frozen=True)
class TierOutcome:
    """What one tier attempt produced.

    ``result`` is set only on success; ``reason`` explains a skip or failure.
    """

    status: TierStatus
    result: ScoreResult | None = None
    reason: str = ""

    @classmethod
    def success(cls, result: ScoreResult) -> "TierOutcome":
        return cls(TierStatus.SUCCESS, result=result)

    @classmethod
    def skip(cls, reason: str) -> "TierOutcome":
        return cls(TierStatus.SKIP, reason=reason)

    @classmethod
    def fail(cls, reason: str) -> "TierOutcome":
        return cls(TierStatus.FAIL, reason=reason)
