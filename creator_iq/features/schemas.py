"""Data models for post-set feature extraction.

Every model defaults to zeros so an empty post set yields a well-formed,
all-zero report instead of a division error.
"""

from pydantic import BaseModel, Field


class ContentQuality(BaseModel):
    """Length and presence ratios over a post set."""

    avg_length: float = 0.0
    long_post_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    short_post_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    emoji_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    link_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    mention_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    hashtag_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    question_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    exclamation_ratio: float = Field(default=0.0, ge=0.0, le=1.0)


class EngagementStats(BaseModel):
    """Interaction totals, threshold ratios and consistency."""

    total_engagement: int = 0
    engagement_per_post: float = 0.0
    high_engagement_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    viral_post_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    consistency_score: float = Field(default=0.0, ge=0.0, le=100.0)


class WritingStyle(BaseModel):
    """Sentence, word and vocabulary metrics over the joined text."""

    avg_words_per_sentence: float = 0.0
    avg_word_length: float = 0.0
    vocabulary_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    proper_capitalization: float = Field(default=0.0, ge=0.0, le=1.0)
    total_words: int = 0
    unique_words: int = 0


class TopicDiversity(BaseModel):
    """Keyword hits per topic category."""

    topic_counts: dict[str, int] = Field(default_factory=dict)
    total_matches: int = 0
    active_topics: int = 0
    diversity_score: float = Field(default=0.0, ge=0.0, le=100.0)
    primary_topic: str = ""


class FeatureReport(BaseModel):
    """Read-only summary of a post set, recomputed on every scoring run."""

    post_count: int = 0
    total_likes: int = 0
    total_recasts: int = 0
    total_replies: int = 0
    content: ContentQuality = Field(default_factory=ContentQuality)
    engagement: EngagementStats = Field(default_factory=EngagementStats)
    style: WritingStyle = Field(default_factory=WritingStyle)
    topics: TopicDiversity = Field(default_factory=TopicDiversity)

    def _per_post(self, total: int) -> float:
        return total / max(self.post_count, 1)

    @property
    def avg_likes(self) -> float:
        return self._per_post(self.total_likes)

    @property
    def avg_recasts(self) -> float:
        return self._per_post(self.total_recasts)

    @property
    def avg_replies(self) -> float:
        return self._per_post(self.total_replies)
