"""
Event Synthesis - the pipeline entry point.

    reports -> group_reports -> detect_spikes -> EventAssembler -> events

Window, threshold and summarizer default to settings and the process-wide
summarizer chain; every argument can be overridden per call.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional
import logging

from citypulse.core.settings import settings
from citypulse.models.event import SynthesizedEvent
from citypulse.models.report import Report
from citypulse.services.event_assembler import (
    DEFAULT_DEADLINE,
    EventAssembler,
    SummarizerLike,
    resolve_deadline,
)
from citypulse.services.grouping import WindowLike, group_reports, to_instant, to_window
from citypulse.services.spike_detection import detect_spikes, validate_threshold
from citypulse.services.summarizer.registry import get_summarizer

logger = logging.getLogger(__name__)


def resolve_now(now: Optional[object]) -> datetime:
    return to_instant(now) if now is not None else datetime.now(timezone.utc)


async def synthesize_events(
    reports: Iterable[Report],
    window: Optional[WindowLike] = None,
    threshold: Optional[int] = None,
    now: Optional[datetime] = None,
    summarizer: Optional[SummarizerLike] = None,
    timeout_seconds: Optional[float] = DEFAULT_DEADLINE,
) -> List[SynthesizedEvent]:
    """
    Fuse similar recent reports into synthesized events.

    Args:
        reports: Report collection (any iterable)
        window: Recency window; defaults to EVENT_WINDOW_MINUTES
        threshold: Minimum bucket size; defaults to SPIKE_THRESHOLD
        now: Reference instant; defaults to current UTC time
        summarizer: Summarizer adapter or callable; defaults to the registry
        timeout_seconds: Per-call summarizer deadline; None disables it. When omitted,
            SUMMARIZER_DEADLINE_SECONDS or the summarizer's own timeout applies

    Returns:
        One event per bucket that reached the threshold, in bucket order

    Raises:
        ValueError: non-positive window or threshold, unusable ``now``
    """
    window = to_window(window if window is not None else timedelta(minutes=settings.EVENT_WINDOW_MINUTES))
    threshold = validate_threshold(threshold if threshold is not None else settings.SPIKE_THRESHOLD)
    now = resolve_now(now)
    summarizer = summarizer if summarizer is not None else get_summarizer()
    timeout_seconds = resolve_deadline(summarizer, timeout_seconds)

    buckets = group_reports(reports, window, now)
    candidates = detect_spikes(buckets, threshold)
    if not candidates:
        return []

    events = await EventAssembler(summarizer, timeout_seconds).assemble(candidates, now)
    logger.info(f"Synthesized {len(events)} event(s) from {len(buckets)} bucket(s)")
    return events
