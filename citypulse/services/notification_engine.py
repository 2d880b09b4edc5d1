"""
Notification Engine - personalized updates per subscribed tag.

Reports are filtered by the user's preferred locations and tags, grouped
by category, and each group becomes one notification.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional
import asyncio

from citypulse.models.insights import Notification, NotificationPreferences
from citypulse.models.report import Report
from citypulse.services.event_assembler import (
    SummarizerLike,
    join_descriptions,
    request_summary,
    resolve_deadline,
)
from citypulse.services.event_synthesis import resolve_now
from citypulse.services.grouping import resolve_category_key, resolve_location_key
from citypulse.services.summarizer.registry import get_summarizer


def filter_by_preferences(reports: Iterable[Report], preferences: NotificationPreferences) -> List[Report]:
    locations = set(preferences.locations)
    tags = set(preferences.tags)
    return [
        report
        for report in reports
        if (not locations or resolve_location_key(report) in locations)
        and (not tags or resolve_category_key(report) in tags)
    ]


async def _notify(
    tag: str,
    group: List[Report],
    summarizer: SummarizerLike,
    now: datetime,
) -> Notification:
    result = await request_summary(
        summarizer,
        join_descriptions(group),
        tag,
        None,
        resolve_deadline(summarizer),
    )
    return Notification(
        title=f"Update: {tag}",
        message=(result.summary.strip() if result else "") or f"Recent activity for {tag}",
        timestamp=now,
        type=tag,
    )


async def generate_notifications(
    reports: Iterable[Report],
    preferences: Optional[NotificationPreferences] = None,
    summarizer: Optional[SummarizerLike] = None,
    now: Optional[datetime] = None,
) -> List[Notification]:
    """
    One notification per matching tag, in first-seen tag order.
    """
    preferences = preferences or NotificationPreferences()
    summarizer = summarizer if summarizer is not None else get_summarizer()
    now = resolve_now(now)

    grouped: Dict[str, List[Report]] = {}
    for report in filter_by_preferences(reports, preferences):
        grouped.setdefault(resolve_category_key(report), []).append(report)

    notifications = await asyncio.gather(
        *(_notify(tag, group, summarizer, now) for tag, group in grouped.items())
    )
    return list(notifications)
