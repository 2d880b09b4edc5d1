"""
Summarizer plug-ins.

Pluggable adapters that turn clustered report text into a summary and a
severity. The pipeline depends only on the Summarizer interface.
"""

from citypulse.services.summarizer.base import Summarizer, SummarizerError, SummaryResult
from citypulse.services.summarizer.gemini_provider import GeminiSummarizer
from citypulse.services.summarizer.mock_provider import MockSummarizer
from citypulse.services.summarizer.registry import SummarizerRegistry, get_summarizer

__all__ = [
    "Summarizer",
    "SummarizerError",
    "SummaryResult",
    "GeminiSummarizer",
    "MockSummarizer",
    "SummarizerRegistry",
    "get_summarizer",
]
