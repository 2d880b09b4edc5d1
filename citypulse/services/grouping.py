"""
Grouping Engine - partitions reports into (location, category) buckets
within a recency window.

KEY PRINCIPLE:
- Buckets are recomputed on every call, never persisted or updated
- Pure and deterministic: same reports + same ``now`` = same buckets
- Reports with unknown timestamps or outside the window are skipped, not errors

CANONICALIZATION:
- location: structured city > structured area > flat location > flat city > "Unknown"
- category: AI tag > user category > "General"
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union
import logging

from citypulse.models.event import BucketKey
from citypulse.models.report import Report, ReportLocation
from citypulse.utils.timestamps import normalize_timestamp

logger = logging.getLogger(__name__)


# Constants
UNKNOWN_LOCATION = "Unknown"
DEFAULT_CATEGORY = "General"

WindowLike = Union[timedelta, int, float]


def _clean(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def resolve_location_key(report: Report) -> str:
    """Canonical location key of a report (see module docstring for priority)."""
    location = report.location
    if isinstance(location, ReportLocation):
        candidates = [location.city, location.area]
    else:
        candidates = [location]
    candidates.append(report.city)

    for candidate in candidates:
        cleaned = _clean(candidate)
        if cleaned:
            return cleaned
    return UNKNOWN_LOCATION


def resolve_category_key(report: Report) -> str:
    """Canonical category key: AI tag first, then the user's category."""
    return _clean(report.ai_tag) or _clean(report.category) or DEFAULT_CATEGORY


def to_window(window: WindowLike) -> timedelta:
    """
    Coerce a window to a positive timedelta.

    Numbers are read as milliseconds. Non-positive windows are a
    programmer error and raise ValueError.
    """
    if isinstance(window, bool):
        raise ValueError(f"Invalid window: {window!r}")
    if isinstance(window, (int, float)):
        window = timedelta(milliseconds=window)
    if not isinstance(window, timedelta):
        raise ValueError(f"Invalid window: {window!r}")
    if window <= timedelta(0):
        raise ValueError(f"Window must be positive, got {window}")
    return window


def to_instant(now: Optional[object]) -> datetime:
    """Normalize a reference instant; naive datetimes are read as UTC."""
    instant = normalize_timestamp(now)
    if instant is None:
        raise ValueError(f"Invalid reference time: {now!r}")
    return instant


def within_window(report: Report, window: timedelta, now: datetime) -> bool:
    """True if the report happened in [now - window, now]."""
    if report.timestamp is None:
        return False
    age = now - report.timestamp
    return timedelta(0) <= age <= window


def group_reports(
    reports: Iterable[Report],
    window: WindowLike,
    now: datetime,
) -> Dict[BucketKey, List[Report]]:
    """
    Partition reports into (location, category) buckets.

    Args:
        reports: Reports to group (may be empty)
        window: Recency window (timedelta, or milliseconds)
        now: Reference instant the window ends at

    Returns:
        Insertion-ordered dict of BucketKey -> reports in arrival order
    """
    window = to_window(window)
    now = to_instant(now)

    buckets: Dict[BucketKey, List[Report]] = {}
    skipped = 0

    for report in reports:
        if not within_window(report, window, now):
            skipped += 1
            continue

        key = BucketKey(resolve_location_key(report), resolve_category_key(report))
        buckets.setdefault(key, []).append(report)

    if skipped:
        logger.debug(f"Grouping skipped {skipped} report(s) outside the window or without a timestamp")

    return buckets
