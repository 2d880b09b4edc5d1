"""
Alert Analyzer - spike alerts over the (longer) alert window.

Uses the same grouping and spike detection as event synthesis, but emits
Alert records: a message, an impact label and a probability derived from
how far the bucket is above the threshold.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional
import asyncio
import logging

from citypulse.core.settings import settings
from citypulse.models.event import DEFAULT_SEVERITY, Alert, CandidateEvent
from citypulse.models.report import Report
from citypulse.services.event_assembler import (
    DEFAULT_DEADLINE,
    SummarizerLike,
    join_descriptions,
    request_summary,
    resolve_deadline,
)
from citypulse.services.event_synthesis import resolve_now
from citypulse.services.grouping import WindowLike, group_reports, to_window
from citypulse.services.spike_detection import detect_spikes, validate_threshold
from citypulse.services.summarizer.registry import get_summarizer

logger = logging.getLogger(__name__)


DEFAULT_IMPACT = "Potential issue detected"


def spike_probability(count: int, threshold: int) -> float:
    """0.5 at the threshold, 1.0 at twice the threshold and beyond."""
    return round(min(1.0, count / (2 * threshold)), 2)


def spike_message(candidate: CandidateEvent) -> str:
    return f"Spike: {candidate.count} reports of {candidate.category_key} in {candidate.location_key}"


async def _build_alert(
    candidate: CandidateEvent,
    threshold: int,
    now: datetime,
    summarizer: SummarizerLike,
    timeout_seconds: Optional[float],
) -> Alert:
    result = await request_summary(
        summarizer,
        join_descriptions(candidate.reports),
        candidate.category_key,
        candidate.location_key,
        timeout_seconds,
    )

    message = result.summary.strip() if result and result.summary.strip() else spike_message(candidate)
    return Alert(
        type=candidate.category_key,
        area=candidate.location_key,
        message=message,
        severity=result.severity if result else DEFAULT_SEVERITY,
        count=candidate.count,
        timestamp=now,
        impact=DEFAULT_IMPACT,
        probability=spike_probability(candidate.count, threshold),
    )


async def analyze_alerts(
    reports: Iterable[Report],
    window: Optional[WindowLike] = None,
    threshold: Optional[int] = None,
    now: Optional[datetime] = None,
    summarizer: Optional[SummarizerLike] = None,
    timeout_seconds: Optional[float] = DEFAULT_DEADLINE,
) -> List[Alert]:
    """
    Detect report spikes in the alert window and describe them.

    Returns:
        One Alert per spike, in bucket order (empty if no spikes)
    """
    window = to_window(window if window is not None else timedelta(minutes=settings.ALERT_WINDOW_MINUTES))
    threshold = validate_threshold(threshold if threshold is not None else settings.SPIKE_THRESHOLD)
    now = resolve_now(now)
    summarizer = summarizer if summarizer is not None else get_summarizer()
    timeout_seconds = resolve_deadline(summarizer, timeout_seconds)

    candidates = detect_spikes(group_reports(reports, window, now), threshold)
    if not candidates:
        return []

    alerts = await asyncio.gather(
        *(_build_alert(candidate, threshold, now, summarizer, timeout_seconds) for candidate in candidates)
    )
    logger.info(f"Generated {len(alerts)} spike alert(s)")
    return list(alerts)
