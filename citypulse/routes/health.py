"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from citypulse.core.settings import settings
from citypulse.services.report_source import ReportSource, get_report_source
from citypulse.services.summarizer.base import Summarizer
from citypulse.services.summarizer.registry import get_summarizer
from datetime import datetime


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(summarizer: Summarizer = Depends(get_summarizer)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "summarizer": summarizer.get_model_info().get("name"),
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/source")
async def report_source_health(source: ReportSource = Depends(get_report_source)):
    """
    Report source connectivity check.
    """
    try:
        details = await run_in_threadpool(source.describe)
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Report source unavailable: {str(e)}"
        )

    return {
        "status": "healthy",
        **details,
        "timestamp": datetime.utcnow().isoformat()
    }
