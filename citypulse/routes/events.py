"""
Event endpoints - synthesized events and spike alerts.

Both endpoints are read-only snapshots computed on demand from the
current report source. Nothing is persisted.
"""

from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool

from citypulse.models.event import Alert, SynthesizedEvent
from citypulse.services.alert_analyzer import analyze_alerts
from citypulse.services.event_synthesis import synthesize_events
from citypulse.services.report_source import ReportSource, get_report_source
from citypulse.services.summarizer.base import Summarizer
from citypulse.services.summarizer.registry import get_summarizer


router = APIRouter(tags=["Events"])


def _window(window_minutes: Optional[int]) -> Optional[timedelta]:
    return timedelta(minutes=window_minutes) if window_minutes is not None else None


@router.get("/events", response_model=List[SynthesizedEvent])
async def get_synthesized_events(
    window_minutes: Optional[int] = Query(None, ge=1, le=7 * 24 * 60, description="Recency window in minutes"),
    threshold: Optional[int] = Query(None, ge=1, le=1000, description="Minimum reports per bucket"),
    source: ReportSource = Depends(get_report_source),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """
    Fuse similar recent reports into synthesized events.

    Reports are grouped by (area, category) inside the window; every group
    with at least ``threshold`` reports becomes one event with an
    AI-assisted summary and severity.

    Example:
        GET /events?window_minutes=30&threshold=3
    """
    try:
        reports = await run_in_threadpool(source.fetch_reports)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to load reports: {str(e)}"
        )

    return await synthesize_events(
        reports,
        window=_window(window_minutes),
        threshold=threshold,
        summarizer=summarizer,
    )


@router.get("/alerts", response_model=List[Alert])
async def get_alerts(
    window_minutes: Optional[int] = Query(None, ge=1, le=7 * 24 * 60, description="Alert window in minutes"),
    threshold: Optional[int] = Query(None, ge=1, le=1000, description="Minimum reports per bucket"),
    source: ReportSource = Depends(get_report_source),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """
    Spike alerts: buckets that reached the threshold in the alert window.

    Example:
        GET /alerts?window_minutes=60
    """
    try:
        reports = await run_in_threadpool(source.fetch_reports)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to load reports: {str(e)}"
        )

    return await analyze_alerts(
        reports,
        window=_window(window_minutes),
        threshold=threshold,
        summarizer=summarizer,
    )
