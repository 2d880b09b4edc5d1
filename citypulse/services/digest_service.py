"""
Digest Service - per-city digest of recent activity.

A digest is a calm roll-up: a summary, the top events, the mood trend and
a few rule-based key alerts. Failures degrade to an error digest instead
of propagating.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional, Sequence
import asyncio
import logging

from citypulse.models.insights import CityDigest
from citypulse.models.report import Report, ReportLocation
from citypulse.services.event_assembler import (
    SummarizerLike,
    join_descriptions,
    request_summary,
    resolve_deadline,
)
from citypulse.services.event_synthesis import resolve_now
from citypulse.services.grouping import resolve_category_key
from citypulse.services.sentiment_analyzer import mood_trend
from citypulse.services.summarizer.registry import get_summarizer

logger = logging.getLogger(__name__)


HIGH_VOLUME_REPORT_COUNT = 5
MAX_TOP_EVENTS = 3


def report_matches_city(report: Report, city: str) -> bool:
    """A report belongs to a city if any of its location fields names it."""
    location = report.location
    if isinstance(location, ReportLocation):
        names = [location.city, location.area]
    else:
        names = [location]
    names.append(report.city)
    return any(isinstance(name, str) and name.strip() == city for name in names)


def key_alerts_for(report_count: int, categories: Sequence[str]) -> List[str]:
    alerts = []
    if report_count > HIGH_VOLUME_REPORT_COUNT:
        alerts.append("High report volume detected")
    if "Traffic" in categories:
        alerts.append("Traffic congestion reported")
    if "Power" in categories:
        alerts.append("Power issues in the area")
    return alerts


def empty_digest(city: str) -> CityDigest:
    return CityDigest(
        city=city,
        summary=f"No recent activity in {city}",
        top_events=[],
        mood_trend="Neutral",
        key_alerts=[],
        report_count=0,
    )


def error_digest(city: str) -> CityDigest:
    return CityDigest(
        city=city,
        summary=f"Unable to generate digest for {city}",
        top_events=[],
        mood_trend="Unknown",
        key_alerts=[],
        report_count=0,
        error=True,
    )


async def generate_digest(
    reports: Iterable[Report],
    city: str,
    summarizer: Optional[SummarizerLike] = None,
    now: Optional[datetime] = None,
) -> CityDigest:
    """Build the digest for one city."""
    try:
        now = resolve_now(now)
        summarizer = summarizer if summarizer is not None else get_summarizer()

        city_reports = [report for report in reports if report_matches_city(report, city)]
        if not city_reports:
            return empty_digest(city)

        categories = [resolve_category_key(report) for report in city_reports]
        unique_categories = list(dict.fromkeys(categories))

        result = await request_summary(
            summarizer,
            join_descriptions(city_reports, ". "),
            None,
            city,
            resolve_deadline(summarizer),
        )

        if result and result.top_issues:
            top_events = result.top_issues[:MAX_TOP_EVENTS]
        else:
            counts = Counter(categories)
            top_events = sorted(unique_categories, key=lambda c: -counts[c])[:MAX_TOP_EVENTS]

        return CityDigest(
            city=city,
            summary=(result.summary.strip() if result else "") or f"Recent activity summary for {city}",
            top_events=top_events,
            mood_trend=mood_trend(report.description for report in city_reports),
            key_alerts=key_alerts_for(len(city_reports), unique_categories),
            report_count=len(city_reports),
            generated_at=now,
        )
    except Exception as e:
        logger.error(f"Digest generation failed for {city}: {e}")
        return error_digest(city)


async def generate_multi_city_digest(
    reports: Iterable[Report],
    cities: Sequence[str],
    summarizer: Optional[SummarizerLike] = None,
    now: Optional[datetime] = None,
) -> List[CityDigest]:
    """Digests for several cities, generated concurrently, in ``cities`` order."""
    reports = list(reports)
    digests = await asyncio.gather(*(generate_digest(reports, city, summarizer, now) for city in cities))
    return list(digests)
