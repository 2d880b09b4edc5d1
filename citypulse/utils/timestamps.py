"""
Timestamp normalization for incoming reports.

Reports arrive with timestamps in whatever shape the upstream produced:
ISO strings, native datetimes, epoch milliseconds, or Firestore-style
``{seconds, nanoseconds}`` wrappers. Everything is funnelled through
``normalize_timestamp`` at Report construction so the aggregation core
only ever sees timezone-aware UTC datetimes (or None).

CRITICAL: This is a deterministic, non-raising function. An unparsable
value returns None and the report is later excluded from every bucket.
"""

import logging
import math
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_epoch(value: float, unit: float = 1.0, nanos: float = 0) -> Optional[datetime]:
    """``value / unit`` epoch seconds plus ``nanos``; None if out of range."""
    try:
        seconds = value / unit + nanos / 1e9
        if math.isnan(seconds) or math.isinf(seconds):
            return None
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_string(value: str) -> Optional[datetime]:
    text = value.strip()
    if not text:
        return None

    # ISO-8601, including the trailing "Z" JavaScript's toISOString() emits
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass

    # RFC-2822 ("Tue, 15 Oct 2024 10:30:00 GMT")
    try:
        return _as_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None


def _parse_mapping(value: Mapping) -> Optional[datetime]:
    for seconds_key, nanos_key in (("seconds", "nanoseconds"), ("_seconds", "_nanoseconds")):
        if seconds_key in value:
            seconds = value.get(seconds_key)
            nanos = value.get(nanos_key) or 0
            if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
                return None
            if isinstance(nanos, bool) or not isinstance(nanos, (int, float)):
                nanos = 0
            return _from_epoch(seconds, nanos=nanos)
    return None


def normalize_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize any supported timestamp shape to an aware UTC datetime.

    Supported inputs:
    - datetime (naive values are read as UTC) and date (midnight UTC)
    - int/float epoch milliseconds (the unit dashboards hand to ``new Date``)
    - ISO-8601 or RFC-2822 strings
    - ``{"seconds": ..., "nanoseconds": ...}`` or ``{"_seconds": ...}`` mappings
    - objects exposing ``to_datetime()``, ``ToDatetime()`` or ``timestamp()``

    Returns:
        Aware UTC datetime, or None if the value cannot be interpreted
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        return _from_epoch(value, unit=1000.0)

    if isinstance(value, str):
        return _parse_string(value)

    if isinstance(value, Mapping):
        return _parse_mapping(value)

    # Firestore / protobuf timestamp objects
    for converter in ("to_datetime", "ToDatetime"):
        method = getattr(value, converter, None)
        if callable(method):
            try:
                converted = method()
            except Exception as e:
                logger.debug(f"Timestamp conversion via {converter}() failed: {e}")
                return None
            return _as_utc(converted) if isinstance(converted, datetime) else None

    method = getattr(value, "timestamp", None)
    if callable(method):
        try:
            return _from_epoch(method())
        except (TypeError, ValueError) as e:
            logger.debug(f"Timestamp conversion via timestamp() failed: {e}")
            return None

    return None
