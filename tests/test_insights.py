"""
Tests for area summaries, city digests, notifications and the mood map.
"""

import pytest

from citypulse.models.insights import NotificationPreferences
from citypulse.services.area_summary import summarize_area
from citypulse.services.digest_service import (
    generate_digest,
    generate_multi_city_digest,
    key_alerts_for,
    report_matches_city,
)
from citypulse.services.notification_engine import filter_by_preferences, generate_notifications
from citypulse.services.sentiment_analyzer import (
    analyze_sentiment,
    analyze_sentiment_by_location,
    emotion_for,
    mood_trend,
)


@pytest.fixture
def mixed_reports(make_report):
    return [
        make_report(minutes_ago=1, location="Delhi", ai_tag="Traffic", description="Traffic jam at ITO"),
        make_report(minutes_ago=2, location="Delhi", ai_tag="Traffic", description="Stuck in traffic again"),
        make_report(minutes_ago=3, location="Delhi", ai_tag="Traffic", description="Signal broken, jam"),
        make_report(minutes_ago=4, location={"city": "Delhi", "area": "Saket"}, category="Power",
                    description="Power outage since noon"),
        make_report(minutes_ago=5, location="Mumbai", category="Water", description="Pipe leak in Bandra"),
    ]


class TestSentiment:

    @pytest.mark.parametrize("text,expected", [
        ("Road fixed quickly, thanks!", "Positive"),
        ("Garbage overflowing and dirty", "Negative"),
        ("So frustrating, stuck again", "Frustrated"),
        ("Unsafe crossing, worried for kids", "Concerned"),
        ("Meeting at the community hall", "Neutral"),
        ("", "Neutral"),
    ])
    def test_labels(self, text, expected):
        assert analyze_sentiment(text) == expected

    def test_ties_prefer_earlier_label(self):
        assert analyze_sentiment("worried and annoyed") == "Frustrated"

    def test_emotions(self):
        assert emotion_for("Positive") == "Happy"
        assert emotion_for("Negative") == "Frustrated"
        assert emotion_for("Neutral") == "Neutral"

    def test_mood_trend(self):
        assert mood_trend(["bad road", "broken light", "thanks for fixing"]) == "Negative"
        assert mood_trend([]) == "Neutral"

    def test_by_location(self):
        entries = analyze_sentiment_by_location([
            {"text": "Great clean park", "location": "Pune"},
            {"text": "Pothole again", "location": "Delhi"},
            {"text": "Happy with the fix", "location": "Pune"},
            {"text": "No location given"},
        ])
        assert [(e.location, e.count) for e in entries] == [("Pune", 2), ("Delhi", 1), ("Unknown", 1)]
        assert entries[0].sentiment == "Positive"
        assert entries[0].emotion == "Happy"


class TestAreaSummary:

    async def test_summary_for_area(self, mixed_reports, static_summarizer, now):
        summary = await summarize_area(mixed_reports, "Delhi", static_summarizer, now)

        assert summary.area == "Delhi"
        assert summary.report_count == 4
        assert summary.summary == "Activity reported in Delhi"
        assert summary.top_issues == ["congestion"]
        assert [(a.type, a.count) for a in summary.predictive_alerts] == [("Traffic", 3)]

    async def test_unknown_area(self, mixed_reports, static_summarizer, now):
        summary = await summarize_area(mixed_reports, "Goa", static_summarizer, now)
        assert summary.report_count == 0
        assert summary.summary == "Recent activity in Goa"
        assert summary.predictive_alerts == []
        assert static_summarizer.calls == []

    async def test_failing_summarizer(self, mixed_reports, failing_summarizer, now):
        summary = await summarize_area(mixed_reports, "Mumbai", failing_summarizer, now)
        assert summary.summary == "Recent activity in Mumbai"
        assert summary.report_count == 1
        assert summary.mood_trend == "Negative"


class TestDigest:

    def test_report_matches_city(self, make_report):
        assert report_matches_city(make_report(location={"area": "Saket", "city": "Delhi"}), "Delhi")
        assert report_matches_city(make_report(city="Delhi"), "Delhi")
        assert not report_matches_city(make_report(location="Mumbai"), "Delhi")

    def test_key_alerts(self):
        assert key_alerts_for(6, ["Traffic", "Power"]) == [
            "High report volume detected",
            "Traffic congestion reported",
            "Power issues in the area",
        ]
        assert key_alerts_for(5, ["Water"]) == []

    async def test_city_digest(self, mixed_reports, static_summarizer, now):
        digest = await generate_digest(mixed_reports, "Delhi", static_summarizer, now)

        assert digest.city == "Delhi"
        assert digest.report_count == 4
        assert digest.summary == "Activity reported in Delhi"
        assert digest.top_events == ["congestion"]
        assert digest.key_alerts == ["Traffic congestion reported", "Power issues in the area"]
        assert digest.generated_at == now
        assert not digest.error
        text, category, area = static_summarizer.calls[0]
        assert text.startswith("Traffic jam at ITO. Stuck in traffic again")
        assert (category, area) == (None, "Delhi")

    async def test_top_events_fall_back_to_categories(self, mixed_reports, failing_summarizer, now):
        digest = await generate_digest(mixed_reports, "Delhi", failing_summarizer, now)
        assert digest.top_events == ["Traffic", "Power"]
        assert digest.summary == "Recent activity summary for Delhi"

    async def test_empty_city(self, mixed_reports, static_summarizer, now):
        digest = await generate_digest(mixed_reports, "Chennai", static_summarizer, now)
        assert digest.summary == "No recent activity in Chennai"
        assert digest.report_count == 0
        assert digest.mood_trend == "Neutral"

    async def test_errors_become_error_digest(self, static_summarizer, now):
        class BrokenReports:
            def __iter__(self):
                raise RuntimeError("source exploded")

        digest = await generate_digest(BrokenReports(), "Delhi", static_summarizer, now)
        assert digest.error
        assert digest.summary == "Unable to generate digest for Delhi"

    async def test_multi_city_keeps_order(self, mixed_reports, static_summarizer, now):
        digests = await generate_multi_city_digest(iter(mixed_reports), ["Mumbai", "Delhi", "Agra"],
                                                   static_summarizer, now)
        assert [(d.city, d.report_count) for d in digests] == [("Mumbai", 1), ("Delhi", 4), ("Agra", 0)]


class TestNotifications:

    def test_filter_by_preferences(self, mixed_reports):
        prefs = NotificationPreferences(locations=["Delhi"], tags=["Power"])
        assert [r.description for r in filter_by_preferences(mixed_reports, prefs)] == ["Power outage since noon"]

    def test_empty_preferences_match_everything(self, mixed_reports):
        assert len(filter_by_preferences(mixed_reports, NotificationPreferences())) == 5

    async def test_one_notification_per_tag(self, mixed_reports, static_summarizer, now):
        prefs = NotificationPreferences(locations=["Delhi"])

        notifications = await generate_notifications(mixed_reports, prefs, static_summarizer, now)

        assert [n.title for n in notifications] == ["Update: Traffic", "Update: Power"]
        assert [n.type for n in notifications] == ["Traffic", "Power"]
        assert notifications[0].message == "Traffic reported in the city"
        assert all(n.timestamp == now for n in notifications)

    async def test_fallback_message(self, mixed_reports, failing_summarizer, now):
        prefs = NotificationPreferences(tags=["Water"])
        notifications = await generate_notifications(mixed_reports, prefs, failing_summarizer, now)
        assert [n.message for n in notifications] == ["Recent activity for Water"]

    async def test_no_matches(self, mixed_reports, static_summarizer, now):
        prefs = NotificationPreferences(tags=["Fire"])
        assert await generate_notifications(mixed_reports, prefs, static_summarizer, now) == []
