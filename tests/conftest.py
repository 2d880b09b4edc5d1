"""
pytest configuration and shared fixtures for the CityPulse tests.

Key concern: tests must not require Firestore, a Gemini API key or any
network access. We achieve this by:
  1. Forcing AI_ENABLED=false and REPORT_SOURCE=memory before the app
     (and its Settings) are imported.
  2. Injecting summarizer test doubles instead of real providers.
  3. Overriding FastAPI dependencies for route tests.
"""

import itertools
import os
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("AI_ENABLED", "false")
os.environ.setdefault("REPORT_SOURCE", "memory")

from citypulse.models.report import Report  # noqa: E402
from citypulse.services.summarizer.base import SummaryResult  # noqa: E402


NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
_UNSET = object()


class StaticSummarizer:
    """Deterministic summarizer double that records every call."""

    def __init__(self, severity="High", top_issues=None):
        self.severity = severity
        self.top_issues = top_issues or ["congestion"]
        self.calls = []

    def summarize(self, text, category=None, area=None):
        self.calls.append((text, category, area))
        return SummaryResult(
            summary=f"{category or 'Activity'} reported in {area or 'the city'}",
            severity=self.severity,
            top_issues=self.top_issues,
            model_name="static-test",
        )


class FailingSummarizer:
    """Summarizer double that always raises."""

    def __init__(self):
        self.calls = 0

    def summarize(self, text, category=None, area=None):
        self.calls += 1
        raise RuntimeError("provider down")


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json


class FakeSession:
    """
    Minimal stand-in for requests.Session.

    ``responses`` maps a URL substring to a FakeResponse, an exception, or
    a list of those consumed in order.
    """

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def _next(self, url):
        for fragment, outcome in self.responses.items():
            if fragment in url:
                if isinstance(outcome, list):
                    outcome = outcome.pop(0)
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"Unexpected request to {url}")

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self._next(url)

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self._next(url)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_report(now):
    """
    Factory for reports relative to ``now``.

    Usage:
        make_report(minutes_ago=5, location="Delhi", ai_tag="Traffic")
    """
    ids = itertools.count(1)

    def _make(minutes_ago=5, description="Something happened", timestamp=_UNSET, reference=None, **fields):
        if timestamp is _UNSET:
            timestamp = (reference or now) - timedelta(minutes=minutes_ago)
        fields.setdefault("id", f"r-{next(ids)}")
        return Report(description=description, timestamp=timestamp, **fields)

    return _make


@pytest.fixture
def static_summarizer():
    return StaticSummarizer()


@pytest.fixture
def failing_summarizer():
    return FailingSummarizer()


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def live_reports(make_report):
    """Reports timestamped relative to the real clock, for route tests."""
    real_now = datetime.now(timezone.utc)
    reports = [
        make_report(minutes_ago=m, reference=real_now, location="Delhi", ai_tag="Traffic",
                    description=f"Heavy traffic jam near ITO {m}")
        for m in (2, 4, 6, 8)
    ]
    reports += [
        make_report(minutes_ago=m, reference=real_now, location={"city": "Mumbai"}, category="Power",
                    description="Power outage in Andheri")
        for m in (3, 5)
    ]
    return reports


@pytest.fixture
async def client(live_reports):
    """
    HTTPX async test client wired to the FastAPI app with an in-memory
    report source and the rule-based summarizer.
    """
    from citypulse.main import app
    from citypulse.services.report_source import InMemoryReportSource, get_report_source
    from citypulse.services.summarizer.mock_provider import MockSummarizer
    from citypulse.services.summarizer.registry import get_summarizer

    app.dependency_overrides[get_report_source] = lambda: InMemoryReportSource(live_reports)
    app.dependency_overrides[get_summarizer] = lambda: MockSummarizer()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
