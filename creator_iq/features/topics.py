"""Topic categories and text patterns used by the feature extractors.

Topic keywords are matched on word boundaries against lowercased text, so
"ai" counts in "ai agents" but not in "said". Emoji keywords are matched
as-is. Category order matters: it breaks ties for the primary topic.
"""

import re

TOPIC_KEYWORDS: dict[str, tuple[str, ...]] = {
    "tech": (
        "ai", "artificial intelligence", "machine learning", "blockchain",
        "crypto", "web3", "programming", "code", "software", "tech",
        "technology", "startup", "entrepreneur",
    ),
    "finance": (
        "money", "finance", "investment", "trading", "stock", "market",
        "economy", "financial", "wealth", "profit", "loss", "portfolio",
    ),
    "politics": (
        "politics", "government", "policy", "election", "vote", "democrat",
        "republican", "liberal", "conservative", "political",
    ),
    "culture": (
        "culture", "art", "music", "film", "movie", "book", "literature",
        "poetry", "creative", "design", "fashion", "style",
    ),
    "sports": (
        "sports", "football", "basketball", "soccer", "baseball", "game",
        "team", "player", "championship", "league",
    ),
    "humor": (
        "funny", "joke", "humor", "comedy", "lol", "haha", "laugh",
        "hilarious", "😂", "😄", "😆",
    ),
    "philosophy": (
        "philosophy", "meaning", "purpose", "existence", "truth", "reality",
        "consciousness", "mind", "thought", "wisdom",
    ),
    "science": (
        "science", "research", "study", "experiment", "data", "analysis",
        "scientific", "discovery", "theory", "hypothesis",
    ),
}

TOPIC_ORDER: tuple[str, ...] = tuple(TOPIC_KEYWORDS)


def _compile_topic(keywords: tuple[str, ...]) -> re.Pattern[str]:
    words = [re.escape(k) for k in keywords if k.isascii()]
    symbols = [re.escape(k) for k in keywords if not k.isascii()]
    # Longest first so "artificial intelligence" wins over "art"
    words.sort(key=len, reverse=True)
    parts = [rf"\b(?:{'|'.join(words)})\b"] if words else []
    parts.extend(symbols)
    return re.compile("|".join(parts))


TOPIC_PATTERNS: dict[str, re.Pattern[str]] = {
    topic: _compile_topic(keywords) for topic, keywords in TOPIC_KEYWORDS.items()
}

# Pictographs, emoticons, transport/map symbols, dingbats and misc symbols
EMOJI_PATTERN = re.compile(
    "[\U0001F300-\U0001F5FF\U0001F600-\U0001F64F\U0001F680-\U0001F6FF"
    "\U0001F900-\U0001F9FF\U0001FA70-\U0001FAFF\u2600-\u26FF\u2700-\u27BF]"
)
LINK_PATTERN = re.compile(r"https?://\S+")
MENTION_PATTERN = re.compile(r"@\w+")
HASHTAG_PATTERN = re.compile(r"#\w+")
QUESTION_PATTERN = re.compile(r"\?")
EXCLAMATION_PATTERN = re.compile(r"!")

SENTENCE_SPLIT = re.compile(r"[.!?]+")
NON_WORD = re.compile(r"[^\w]")
