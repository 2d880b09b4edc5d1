"""
Insight endpoints - area summaries, city digests, notifications, mood map,
city assistant and social feed analysis.

All insights are calm, read-only roll-ups of the current reports.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from fastapi.concurrency import run_in_threadpool

from citypulse.data.indian_cities import find_city
from citypulse.models.insights import (
    AnalyzedPost,
    AreaSummary,
    AssistantAnswer,
    AssistantQuestion,
    CityDigest,
    MoodEntry,
    Notification,
    NotificationPreferences,
    SocialPost,
)
from citypulse.models.report import Report
from citypulse.services.area_summary import summarize_area
from citypulse.services.city_assistant import GENERAL, ask_city_assistant, extract_city
from citypulse.services.city_metrics_service import CityMetricsService, get_city_metrics_service
from citypulse.services.digest_service import generate_digest, generate_multi_city_digest, report_matches_city
from citypulse.services.grouping import resolve_location_key
from citypulse.services.notification_engine import generate_notifications
from citypulse.services.report_source import ReportSource, get_report_source
from citypulse.services.sentiment_analyzer import analyze_sentiment_by_location
from citypulse.services.social_feed import analyze_social_feed
from citypulse.services.summarizer.base import Summarizer
from citypulse.services.summarizer.registry import get_summarizer


router = APIRouter(prefix="/insights", tags=["Insights"])


async def _load_reports(source: ReportSource) -> List[Report]:
    try:
        return await run_in_threadpool(source.fetch_reports)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to load reports: {str(e)}"
        )


@router.get("/areas/{area}", response_model=AreaSummary)
async def get_area_summary(
    area: str = Path(..., min_length=1, max_length=100),
    source: ReportSource = Depends(get_report_source),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """Recent activity, mood and active spike alerts for one area."""
    reports = await _load_reports(source)
    return await summarize_area(reports, area, summarizer)


@router.get("/digest", response_model=List[CityDigest])
async def get_multi_city_digest(
    cities: str = Query(..., min_length=1, description="Comma-separated city names", examples=["Delhi,Mumbai"]),
    source: ReportSource = Depends(get_report_source),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """Digests for several cities, in the requested order."""
    names = [name.strip() for name in cities.split(",") if name.strip()]
    if not names:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No city names given")
    reports = await _load_reports(source)
    return await generate_multi_city_digest(reports, names, summarizer)


@router.get("/digest/{city}", response_model=CityDigest)
async def get_city_digest(
    city: str = Path(..., min_length=1, max_length=100),
    source: ReportSource = Depends(get_report_source),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """Summary, top events, mood trend and key alerts for one city."""
    reports = await _load_reports(source)
    return await generate_digest(reports, city, summarizer)


@router.post("/notifications", response_model=List[Notification])
async def get_notifications(
    preferences: NotificationPreferences,
    source: ReportSource = Depends(get_report_source),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """One update per subscribed tag, filtered by preferred locations."""
    reports = await _load_reports(source)
    return await generate_notifications(reports, preferences, summarizer)


@router.get("/mood", response_model=List[MoodEntry])
async def get_mood_map(source: ReportSource = Depends(get_report_source)):
    """Sentiment per location, computed from report descriptions."""
    reports = await _load_reports(source)
    posts = [{"text": report.description, "location": resolve_location_key(report)} for report in reports]
    return analyze_sentiment_by_location(posts)


@router.post("/assistant", response_model=AssistantAnswer)
async def ask_assistant(
    body: AssistantQuestion,
    source: ReportSource = Depends(get_report_source),
    summarizer: Summarizer = Depends(get_summarizer),
    metrics_service: CityMetricsService = Depends(get_city_metrics_service),
):
    """Answer a question about a city from its recent reports and live metrics."""
    city = body.city.strip() if body.city and body.city.strip() else extract_city(body.question)
    known = find_city(city)
    if known is not None:
        city = known["name"]

    reports = await _load_reports(source)
    if city != GENERAL:
        reports = [report for report in reports if report_matches_city(report, city)]

    metrics = None
    if known is not None:
        metrics = await run_in_threadpool(metrics_service.fetch_city_metrics, city)

    return await ask_city_assistant(body.question, reports, metrics, summarizer, city=city)


@router.post("/social", response_model=List[AnalyzedPost])
async def analyze_social_posts(posts: List[SocialPost]):
    """Sentiment and topics for each post, in request order."""
    return analyze_social_feed(posts)
