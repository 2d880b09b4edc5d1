"""
Summarizer Base Interface.

Defines the contract every summarizer adapter implements:

    summarize(text, category, area) -> SummaryResult

A summarizer turns the concatenated descriptions of a cluster into a short
natural-language summary plus a severity label. It is the seam where a
real generative-AI backend replaces the rule-based one; the pipeline only
ever depends on this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from citypulse.models.event import DEFAULT_SEVERITY, SEVERITY_LEVELS

logger = logging.getLogger(__name__)


class SummarizerError(Exception):
    """Raised by an adapter that cannot produce a usable summary."""


def normalize_severity(value: Any) -> Optional[str]:
    """Map 'high', 'HIGH ', 'High' to 'High'; None for anything unrecognized."""
    if not isinstance(value, str):
        return None
    candidate = value.strip().capitalize()
    return candidate if candidate in SEVERITY_LEVELS else None


class SummaryResult:
    """
    Standardized summarizer response.

    ``error`` is set instead of raising when a provider fails, so callers
    can fall back without try/except around every call.
    """

    def __init__(
        self,
        summary: str = "",
        severity: str = DEFAULT_SEVERITY,
        top_issues: Optional[List[str]] = None,
        model_name: str = "",
        inference_timestamp: Optional[datetime] = None,
        error: Optional[str] = None,
    ):
        self.summary = summary
        self.severity = severity
        self.top_issues = list(top_issues or [])
        self.model_name = model_name
        self.inference_timestamp = inference_timestamp or datetime.utcnow()
        self.error = error

    @classmethod
    def failed(cls, model_name: str, error: str) -> "SummaryResult":
        return cls(summary="", severity=DEFAULT_SEVERITY, model_name=model_name, error=error)

    def __repr__(self) -> str:
        return (
            f"SummaryResult(summary={self.summary!r}, severity={self.severity!r}, "
            f"top_issues={self.top_issues!r}, error={self.error!r})"
        )


class Summarizer(ABC):
    """
    Abstract base class for summarizer adapters.

    Implementations SHOULD return a SummaryResult (with ``error`` set on
    failure) rather than raise, and must respect their own timeout.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """True if this adapter is configured and ready."""
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """Dict with 'name' and 'version' keys."""
        pass

    @abstractmethod
    def get_timeout_seconds(self) -> float:
        """Upper bound for one summarize() call, in seconds."""
        pass

    @abstractmethod
    def summarize(
        self,
        text: str,
        category: Optional[str] = None,
        area: Optional[str] = None,
    ) -> SummaryResult:
        """
        Summarize the concatenated report text of a cluster.

        Args:
            text: Space-joined report descriptions
            category: Canonical category (None when summarizing a whole area)
            area: Canonical area (None when summarizing a whole category)

        Returns:
            SummaryResult (may carry an error)
        """
        pass
