"""
Social Feed Analyzer - sentiment and topics for a batch of citizen posts.

Each post is labeled independently; a post that cannot be analyzed comes
back Neutral with the General topic instead of failing the batch.
"""

from typing import Callable, Dict, Iterable, List, Tuple
import logging
import re

from citypulse.models.insights import AnalyzedPost, SocialPost
from citypulse.services.sentiment_analyzer import NEUTRAL, analyze_sentiment

logger = logging.getLogger(__name__)


GENERAL_TOPIC = "General"

# Topic order is the output order
TOPIC_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "Traffic": ("traffic", "congestion", "jam", "road"),
    "Weather": ("weather", "rain", "sunny", "hot", "cold"),
    "Power": ("power", "electricity", "outage", "cut"),
    "Air Quality": ("air", "pollution", "aqi", "smog"),
    "Transport": ("metro", "bus", "train", "transport"),
    "Food": ("food", "restaurant", "festival", "dining"),
    "Infrastructure": ("road", "bridge", "construction"),
    "Safety": ("police", "security", "crime"),
}

_WORD_RE = re.compile(r"[a-z]+")


def extract_topics(text: str) -> List[str]:
    """
    Topics whose keywords appear in ``text`` as whole words.

    A keyword may map to several topics ("road" is both Traffic and
    Infrastructure). Falls back to ["General"] when nothing matches.
    """
    words = set(_WORD_RE.findall((text or "").lower()))
    topics = [topic for topic, keywords in TOPIC_KEYWORDS.items() if words.intersection(keywords)]
    return topics or [GENERAL_TOPIC]


def analyze_post(post: SocialPost, sentiment_fn: Callable[[str], str] = analyze_sentiment) -> AnalyzedPost:
    try:
        sentiment = sentiment_fn(post.text)
        topics = extract_topics(post.text)
    except Exception as e:
        logger.warning(f"⚠️ Could not analyze post: {e}")
        return AnalyzedPost(**post.model_dump(), sentiment=NEUTRAL, topics=[GENERAL_TOPIC], analyzed=False)

    return AnalyzedPost(**post.model_dump(), sentiment=sentiment, topics=topics, analyzed=True)


def analyze_social_feed(
    posts: Iterable[SocialPost],
    sentiment_fn: Callable[[str], str] = analyze_sentiment,
) -> List[AnalyzedPost]:
    """Label every post, preserving input order."""
    analyzed = [analyze_post(post, sentiment_fn) for post in posts]
    failed = sum(1 for post in analyzed if not post.analyzed)
    if failed:
        logger.warning(f"⚠️ {failed} of {len(analyzed)} post(s) fell back to neutral labels")
    return analyzed
