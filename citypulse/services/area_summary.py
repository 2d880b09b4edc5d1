"""
Area Summary - recent activity in one area.

Summarizes every report whose canonical location matches the area and
attaches the spike alerts currently active there.
"""

from datetime import datetime
from typing import Iterable, Optional

from citypulse.models.insights import AreaSummary
from citypulse.models.report import Report
from citypulse.services.alert_analyzer import analyze_alerts
from citypulse.services.event_assembler import (
    SummarizerLike,
    join_descriptions,
    request_summary,
    resolve_deadline,
)
from citypulse.services.event_synthesis import resolve_now
from citypulse.services.grouping import resolve_location_key
from citypulse.services.sentiment_analyzer import mood_trend
from citypulse.services.summarizer.registry import get_summarizer


async def summarize_area(
    reports: Iterable[Report],
    area: str,
    summarizer: Optional[SummarizerLike] = None,
    now: Optional[datetime] = None,
) -> AreaSummary:
    now = resolve_now(now)
    summarizer = summarizer if summarizer is not None else get_summarizer()
    area_reports = [report for report in reports if resolve_location_key(report) == area]

    result = None
    if area_reports:
        result = await request_summary(
            summarizer,
            join_descriptions(area_reports),
            None,
            area,
            resolve_deadline(summarizer),
        )

    alerts = await analyze_alerts(area_reports, now=now, summarizer=summarizer)

    return AreaSummary(
        area=area,
        summary=(result.summary.strip() if result else "") or f"Recent activity in {area}",
        top_issues=result.top_issues if result else [],
        mood_trend=mood_trend(report.description for report in area_reports),
        report_count=len(area_reports),
        predictive_alerts=alerts,
    )
