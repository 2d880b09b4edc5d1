"""
Mock Summarizer - rule-based provider used when AI is disabled and as the
last fallback.

Deterministic: the same text always yields the same summary, severity and
top issues. Severity derivation is pluggable through ``severity_fn``.
"""

from collections import Counter
from typing import Callable, Dict, List, Optional
import logging
import re

from citypulse.services.summarizer.base import Summarizer, SummaryResult

logger = logging.getLogger(__name__)


HIGH_SEVERITY_WORDS = {
    "urgent", "serious", "major", "severe", "dangerous", "blocking", "blocked",
    "accident", "fire", "flood", "flooding", "collapse", "outage",
}
MEDIUM_SEVERITY_WORDS = {
    "moderate", "significant", "concerning", "growing", "heavy", "jam",
    "waterlogging", "slow", "delay", "leak",
}
STOP_WORDS = {
    "the", "and", "is", "in", "on", "at", "to", "a", "an", "of", "for", "near",
    "with", "from", "this", "that", "there", "here", "have", "has", "been",
    "very", "since", "are", "was", "were", "again", "still", "road",
}

MAX_SUMMARY_LENGTH = 100
MAX_TOP_ISSUES = 3

_WORD_RE = re.compile(r"[a-zA-Z]+")


def keyword_severity(text: str) -> str:
    """Default severity rule: High/Medium keywords, otherwise Low."""
    words = set(_WORD_RE.findall(text.lower()))
    if words & HIGH_SEVERITY_WORDS:
        return "High"
    if words & MEDIUM_SEVERITY_WORDS:
        return "Medium"
    return "Low"


def extract_top_issues(text: str, limit: int = MAX_TOP_ISSUES) -> List[str]:
    """Most frequent meaningful words, ties broken by first appearance."""
    words = [w for w in _WORD_RE.findall(text.lower()) if len(w) > 3 and w not in STOP_WORDS]
    counts = Counter(words)
    first_seen = {}
    for index, word in enumerate(words):
        first_seen.setdefault(word, index)
    ranked = sorted(counts, key=lambda w: (-counts[w], first_seen[w]))
    return ranked[:limit]


def first_sentence(text: str, max_length: int = MAX_SUMMARY_LENGTH) -> str:
    summary = re.split(r"[.!?]", text.strip(), maxsplit=1)[0].strip()
    if len(summary) > max_length:
        summary = summary[: max_length - 3] + "..."
    return summary


class MockSummarizer(Summarizer):
    """
    Rule-based summarizer.

    This is the fallback provider when:
    - AI is disabled in config
    - The real provider fails
    - No API key is available
    """

    MODEL_NAME = "mock-rules-v1"
    MODEL_VERSION = "1.0.0"
    TIMEOUT_SECONDS = 1.0

    def __init__(self, severity_fn: Optional[Callable[[str], str]] = None):
        self.severity_fn = severity_fn or keyword_severity

    def is_enabled(self) -> bool:
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.MODEL_NAME, "version": self.MODEL_VERSION}

    def get_timeout_seconds(self) -> float:
        return self.TIMEOUT_SECONDS

    def summarize(
        self,
        text: str,
        category: Optional[str] = None,
        area: Optional[str] = None,
    ) -> SummaryResult:
        text = text or ""
        try:
            sentence = first_sentence(text)
            if sentence and area:
                summary = f"{sentence} ({area})"
            else:
                summary = sentence

            return SummaryResult(
                summary=summary,
                severity=self.severity_fn(text),
                top_issues=extract_top_issues(text),
                model_name=self.MODEL_NAME,
            )
        except Exception as e:
            logger.error(f"Mock summarizer error: {e}")
            return SummaryResult.failed(self.MODEL_NAME, str(e))
