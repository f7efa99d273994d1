"""Feature extraction over a post set.

Four pure analyzers (content quality, engagement, writing style, topic
diversity) feed a single ``FeatureReport`` consumed by every scoring tier.
"""

from creator_iq.features.extractors import (
    analyze_content_quality,
    analyze_topic_diversity,
    analyze_writing_style,
    build_feature_report,
    calculate_engagement,
    consistency_score,
)
from creator_iq.features.schemas import (
    ContentQuality,
    EngagementStats,
    FeatureReport,
    TopicDiversity,
    WritingStyle,
)

__all__ = [
    "ContentQuality",
    "EngagementStats",
    "FeatureReport",
    "TopicDiversity",
    "WritingStyle",
    "analyze_content_quality",
    "analyze_topic_diversity",
    "analyze_writing_style",
    "build_feature_report",
    "calculate_engagement",
    "consistency_score",
]
