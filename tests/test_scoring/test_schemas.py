"""Tests for score models and bounds."""

import math
from datetime import datetime

import pytest
from pydantic import ValidationError

from creator_iq.scoring.schemas import (
    ProviderScore,
    ScoreResult,
    ScoreSource,
    TierOutcome,
    TierStatus,
    clamp_confidence,
    clamp_score,
    round_half_up,
)


class TestRounding:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (-0.5, 0), (110.0, 110)],
    )
    def test_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_rejected(self, value: float) -> None:
        with pytest.raises(ValueError):
            round_half_up(value)

    def test_clamp_score(self) -> None:
        assert clamp_score(10) == 55
        assert clamp_score(200) == 145
        assert clamp_score(99.5) == 100

    def test_clamp_confidence(self) -> None:
        assert clamp_confidence(-5) == 0
        assert clamp_confidence(150) == 100


class TestScoreResult:
    """Bounds are enforced on construction."""

    def test_out_of_range_values_are_clamped(self) -> None:
        result = ScoreResult(score=300, confidence=-20, source=ScoreSource.PROVIDER_A)
        assert result.score == 145
        assert result.confidence == 0

    def test_fractional_values_are_rounded(self) -> None:
        result = ScoreResult(score=112.5, confidence=70.4, source=ScoreSource.HEURISTIC)
        assert result.score == 113
        assert result.confidence == 70

    def test_non_finite_score_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ScoreResult(score=math.nan, confidence=50, source=ScoreSource.HEURISTIC)

    def test_naive_computed_at_becomes_utc(self) -> None:
        result = ScoreResult(
            score=100, confidence=50, source=ScoreSource.CACHED,
            computed_at=datetime(2025, 1, 1),
        )
        assert result.computed_at.utcoffset().total_seconds() == 0

    def test_json_round_trip_keeps_source(self) -> None:
        result = ScoreResult(score=100, confidence=50, source=ScoreSource.PROVIDER_B)
        restored = ScoreResult(**result.model_dump(mode="json"))
        assert restored == result


class TestProviderScore:
    def test_requires_analysis(self) -> None:
        with pytest.raises(ValidationError):
            ProviderScore(score=100, analysis="", confidence=50)


class TestTierOutcome:
    def test_constructors(self) -> None:
        result = ScoreResult(score=100, confidence=50, source=ScoreSource.HEURISTIC)

        assert TierOutcome.success(result).status == TierStatus.SUCCESS
        assert TierOutcome.success(result).result is result
        assert TierOutcome.skip("no key").reason == "no key"
        assert TierOutcome.fail("timeout").status == TierStatus.FAIL
        assert TierOutcome.fail("timeout").result is None
