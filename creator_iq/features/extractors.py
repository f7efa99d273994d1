"""Feature extractors over a post set.

Pure functions: no I/O, no randomness, no shared state. Each extractor
tolerates an empty post set and returns all-zero values in that case.

Usage:
    from creator_iq.features import build_feature_report

    report = build_feature_report(posts)
    report.engagement.consistency_score
"""

import re
import statistics
from collections.abc import Sequence

from creator_iq.features.schemas import (
    ContentQuality,
    EngagementStats,
    FeatureReport,
    TopicDiversity,
    WritingStyle,
)
from creator_iq.features.topics import (
    EMOJI_PATTERN,
    EXCLAMATION_PATTERN,
    HASHTAG_PATTERN,
    LINK_PATTERN,
    MENTION_PATTERN,
    NON_WORD,
    QUESTION_PATTERN,
    SENTENCE_SPLIT,
    TOPIC_ORDER,
    TOPIC_PATTERNS,
)
from creator_iq.ingestion.schemas import Post

LONG_POST_CHARS = 100
SHORT_POST_CHARS = 50
HIGH_ENGAGEMENT_THRESHOLD = 10
VIRAL_THRESHOLD = 50


def _ratio(count: int, total: int) -> float:
    return count / total if total else 0.0


def _presence_ratio(posts: Sequence[Post], pattern: re.Pattern[str]) -> float:
    """Fraction of posts whose text matches ``pattern`` at least once."""
    return _ratio(sum(1 for p in posts if pattern.search(p.text)), len(posts))


def _joined_text(posts: Sequence[Post]) -> str:
    return " ".join(p.text for p in posts)


# ── Content Quality ──────────────────────────────────


def analyze_content_quality(posts: Sequence[Post]) -> ContentQuality:
    """Average length, long/short ratios and per-feature presence ratios."""
    n = len(posts)
    if n == 0:
        return ContentQuality()

    lengths = [len(p.text) for p in posts]
    return ContentQuality(
        avg_length=sum(lengths) / n,
        long_post_ratio=_ratio(sum(1 for x in lengths if x > LONG_POST_CHARS), n),
        short_post_ratio=_ratio(sum(1 for x in lengths if x < SHORT_POST_CHARS), n),
        emoji_ratio=_presence_ratio(posts, EMOJI_PATTERN),
        link_ratio=_presence_ratio(posts, LINK_PATTERN),
        mention_ratio=_presence_ratio(posts, MENTION_PATTERN),
        hashtag_ratio=_presence_ratio(posts, HASHTAG_PATTERN),
        question_ratio=_presence_ratio(posts, QUESTION_PATTERN),
        exclamation_ratio=_presence_ratio(posts, EXCLAMATION_PATTERN),
    )


# ── Engagement ───────────────────────────────────────


def consistency_score(interactions: Sequence[int]) -> float:
    """Score how uniform interaction counts are across posts (0-100).

    ``max(0, 100 - (population stddev / max(mean, 1)) * 50)``; fewer than two
    posts carry no signal and score 0.
    """
    if len(interactions) < 2:
        return 0.0
    mean = statistics.fmean(interactions)
    stddev = statistics.pstdev(interactions)
    return max(0.0, 100.0 - (stddev / max(mean, 1.0)) * 50.0)


def calculate_engagement(posts: Sequence[Post]) -> EngagementStats:
    """Totals, threshold ratios and consistency of interactions."""
    n = len(posts)
    if n == 0:
        return EngagementStats()

    interactions = [p.interactions for p in posts]
    total = sum(interactions)
    return EngagementStats(
        total_engagement=total,
        engagement_per_post=total / n,
        high_engagement_ratio=_ratio(
            sum(1 for x in interactions if x > HIGH_ENGAGEMENT_THRESHOLD), n,
        ),
        viral_post_ratio=_ratio(
            sum(1 for p in posts if p.amplification > VIRAL_THRESHOLD), n,
        ),
        consistency_score=consistency_score(interactions),
    )


# ── Writing Style ────────────────────────────────────


def analyze_writing_style(posts: Sequence[Post]) -> WritingStyle:
    """Words per sentence, word length, vocabulary and capitalization."""
    text = _joined_text(posts)
    words = text.split()
    sentences = [s for s in SENTENCE_SPLIT.split(text) if s.strip()]

    if not words:
        return WritingStyle()

    unique = {w for w in (NON_WORD.sub("", word.lower()) for word in words) if w}
    capitalized = sum(1 for s in sentences if re.match(r"[A-Z]", s.strip()))

    return WritingStyle(
        avg_words_per_sentence=len(words) / max(len(sentences), 1),
        avg_word_length=sum(len(w) for w in words) / len(words),
        vocabulary_ratio=len(unique) / len(words),
        proper_capitalization=capitalized / max(len(sentences), 1),
        total_words=len(words),
        unique_words=len(unique),
    )


# ── Topic Diversity ──────────────────────────────────


def analyze_topic_diversity(posts: Sequence[Post]) -> TopicDiversity:
    """Count keyword hits per topic and derive diversity and primary topic."""
    text = _joined_text(posts).lower()
    counts = {topic: len(TOPIC_PATTERNS[topic].findall(text)) for topic in TOPIC_ORDER}
    active = sum(1 for c in counts.values() if c > 0)

    # max() keeps the first maximal element, i.e. the first declared topic
    primary = max(TOPIC_ORDER, key=lambda t: counts[t]) if active else ""

    return TopicDiversity(
        topic_counts=counts,
        total_matches=sum(counts.values()),
        active_topics=active,
        diversity_score=min(100.0, 100.0 * active / len(TOPIC_ORDER)),
        primary_topic=primary,
    )


def build_feature_report(posts: Sequence[Post]) -> FeatureReport:
    """Run every extractor over ``posts``."""
    return FeatureReport(
        post_count=len(posts),
        total_likes=sum(p.like_count for p in posts),
        total_recasts=sum(p.recast_count for p in posts),
        total_replies=sum(p.reply_count for p in posts),
        content=analyze_content_quality(posts),
        engagement=calculate_engagement(posts),
        style=analyze_writing_style(posts),
        topics=analyze_topic_diversity(posts),
    )
