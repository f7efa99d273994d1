"""Local scoring: the deterministic heuristic and the degraded fallback.

The heuristic combines four dimension scores (content quality, writing style,
engagement, topic diversity), each clamped to 0-100, into an equally weighted
composite and maps it onto the 55-145 scale with a bounded jitter. The jitter
comes from an injected ``random.Random`` so runs are reproducible under a seed.

The degraded scorer only runs when the heuristic itself faults.
"""

import random

from pydantic import BaseModel

from creator_iq.features.schemas import FeatureReport
from creator_iq.scoring.schemas import (
    ScoreResult,
    ScoreSource,
    clamp,
    clamp_score,
    round_half_up,
)

HEURISTIC_VERSION = "heuristic_v1"
DEGRADED_VERSION = "degraded_v1"

JITTER = 7.5
DEGRADED_CENTER = 85.0
DEGRADED_SPREAD = 20.0


class DimensionScores(BaseModel):
    """Four 0-100 dimension scores and their equally weighted composite."""

    content_quality: float
    writing_style: float
    engagement: float
    topic_diversity: float

    @property
    def composite(self) -> float:
        return 0.25 * (
            self.content_quality + self.writing_style + self.engagement + self.topic_diversity
        )


def compute_dimensions(report: FeatureReport) -> DimensionScores:
    """Weight the extracted features into four 0-100 dimension scores."""
    c, s, e = report.content, report.style, report.engagement
    return DimensionScores(
        content_quality=clamp(
            0.3 * c.avg_length
            + 50 * c.long_post_ratio
            + 30 * c.question_ratio
            + 20 * c.link_ratio
            + 15 * c.mention_ratio,
            0, 100,
        ),
        writing_style=clamp(
            40 * s.vocabulary_ratio
            + 2 * s.avg_words_per_sentence
            + 30 * s.proper_capitalization
            + 3 * s.avg_word_length,
            0, 100,
        ),
        engagement=clamp(
            0.5 * e.engagement_per_post
            + 0.3 * e.consistency_score
            + 50 * e.viral_post_ratio,
            0, 100,
        ),
        topic_diversity=clamp(report.topics.diversity_score, 0, 100),
    )


def base_score(composite: float, post_count: int) -> float:
    """Pre-jitter score on the 55-145 scale (unclamped)."""
    return 70 + 0.6 * composite + 0.2 * post_count


def heuristic_confidence(composite: float, post_count: int) -> int:
    return int(clamp(round_half_up(50 + 2 * post_count + 0.3 * composite), 30, 85))


def _band(value: float, high: str, mid: str, low: str) -> str:
    if value > 70:
        return high
    if value > 50:
        return mid
    return low


def describe_score(score: int) -> str:
    """Qualitative descriptor for a final score."""
    if score >= 130:
        return "exceptional"
    if score >= 115:
        return "above-average"
    if score >= 85:
        return "average"
    if score >= 70:
        return "below-average"
    return "significantly below-average"


def _analysis(report: FeatureReport, dims: DimensionScores, score: int) -> str:
    c, s, e, t = report.content, report.style, report.engagement, report.topics
    return (
        f"Based on comprehensive analysis of {report.post_count} posts, this user demonstrates "
        f"{_band(dims.composite, 'strong', 'moderate', 'limited')} overall cognitive indicators. "
        f"Content quality analysis shows "
        f"{_band(dims.content_quality, 'excellent', 'good', 'basic')} post structure with "
        f"{c.avg_length:.0f} average characters and {c.question_ratio * 100:.0f}% "
        f"question-asking rate. Writing style analysis reveals "
        f"{_band(dims.writing_style, 'sophisticated', 'competent', 'simple')} vocabulary usage "
        f"with {s.vocabulary_ratio * 100:.0f}% vocabulary diversity. Engagement patterns "
        f"indicate {_band(dims.engagement, 'high', 'moderate', 'low')} community interaction "
        f"with {e.consistency_score:.0f}% consistency. Topic diversity analysis shows "
        f"{_band(dims.topic_diversity, 'broad', 'moderate', 'narrow')} interests across "
        f"{t.active_topics}/8 categories, primarily focused on {t.primary_topic or 'none'}. "
        f"These factors collectively suggest {describe_score(score)} cognitive abilities."
    )


def heuristic_score(report: FeatureReport, rng: random.Random) -> ScoreResult:
    """Score a feature report locally.

    ``finalScore = clamp(55, 145, round(base + uniform(-7.5, 7.5)))`` and
    ``confidence = clamp(30, 85, round(50 + 2*posts + 0.3*composite))``.
    """
    dims = compute_dimensions(report)
    composite = dims.composite
    score = clamp_score(base_score(composite, report.post_count) + rng.uniform(-JITTER, JITTER))
    return ScoreResult(
        score=score,
        analysis=_analysis(report, dims, score),
        confidence=heuristic_confidence(composite, report.post_count),
        source=ScoreSource.HEURISTIC,
        model_version=HEURISTIC_VERSION,
    )


def degraded_score(post_count: int, avg_likes: float, rng: random.Random) -> ScoreResult:
    """Last-resort score centred on 85 with low confidence."""
    score = clamp_score(DEGRADED_CENTER + rng.uniform(-DEGRADED_SPREAD, DEGRADED_SPREAD))
    confidence = clamp(round_half_up(40 + 1.5 * post_count), 25, 60)
    return ScoreResult(
        score=score,
        analysis=(
            f"Analysis based on {post_count} posts. The user shows moderate engagement "
            f"patterns with {avg_likes:.1f} average likes per post. Content analysis suggests "
            f"{describe_score(score)} cognitive abilities with room for growth in engagement "
            f"and communication style."
        ),
        confidence=confidence,
        source=ScoreSource.DEGRADED,
        model_version=DEGRADED_VERSION,
    )
