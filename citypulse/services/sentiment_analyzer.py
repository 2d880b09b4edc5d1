"""
Sentiment Analyzer - deterministic lexicon-based mood labels.

Labels: Positive, Neutral, Negative, Frustrated, Concerned.
Used for the mood map and for the mood trend of area summaries and digests.
"""

from collections import Counter
from typing import Dict, Iterable, List, Mapping
import logging
import re

from citypulse.models.insights import MoodEntry
from citypulse.services.grouping import UNKNOWN_LOCATION

logger = logging.getLogger(__name__)


NEUTRAL = "Neutral"

# Order matters: earlier labels win ties
SENTIMENT_LEXICON: Dict[str, set] = {
    "Frustrated": {"frustrated", "frustrating", "annoying", "annoyed", "fed", "worst", "useless", "angry", "stuck", "again"},
    "Concerned": {"worried", "worry", "concern", "concerned", "unsafe", "danger", "dangerous", "risk", "afraid", "fear", "scary"},
    "Negative": {"bad", "broken", "dirty", "poor", "problem", "damaged", "outage", "jam", "leak", "garbage", "overflowing", "pothole"},
    "Positive": {"good", "great", "thanks", "thank", "resolved", "fixed", "clean", "happy", "improved", "smooth", "quick"},
}

EMOTION_BY_SENTIMENT = {
    "Positive": "Happy",
    "Negative": "Frustrated",
    "Frustrated": "Frustrated",
    "Concerned": "Concerned",
    "Cautious": "Cautious",
}

_WORD_RE = re.compile(r"[a-zA-Z]+")


def analyze_sentiment(text: str) -> str:
    """Label with the most lexicon hits; Neutral when nothing matches."""
    words = _WORD_RE.findall((text or "").lower())
    if not words:
        return NEUTRAL

    best_label, best_hits = NEUTRAL, 0
    for label, lexicon in SENTIMENT_LEXICON.items():
        hits = sum(1 for word in words if word in lexicon)
        if hits > best_hits:
            best_label, best_hits = label, hits
    return best_label


def emotion_for(sentiment: str) -> str:
    return EMOTION_BY_SENTIMENT.get(sentiment, NEUTRAL)


def mood_trend(texts: Iterable[str]) -> str:
    """Most common per-text sentiment, ties broken by first appearance."""
    labels = [analyze_sentiment(text) for text in texts]
    if not labels:
        return NEUTRAL
    counts = Counter(labels)
    return max(labels, key=lambda label: (counts[label], -labels.index(label)))


def analyze_sentiment_by_location(posts: Iterable[Mapping]) -> List[MoodEntry]:
    """
    Group posts by location and label each group's combined text.

    Args:
        posts: Mappings with ``text`` and ``location`` keys

    Returns:
        One MoodEntry per location, in first-seen order
    """
    grouped: Dict[str, List[str]] = {}
    for post in posts:
        location = post.get("location") or UNKNOWN_LOCATION
        if not isinstance(location, str):
            location = UNKNOWN_LOCATION
        text = post.get("text") or ""
        grouped.setdefault(location, []).append(text if isinstance(text, str) else str(text))

    entries = []
    for location, texts in grouped.items():
        sentiment = analyze_sentiment(" ".join(texts))
        entries.append(
            MoodEntry(
                location=location,
                sentiment=sentiment,
                emotion=emotion_for(sentiment),
                count=len(texts),
            )
        )
    return entries
