"""
Tests for the city assistant and the social feed analyzer.
"""

import asyncio

import pytest

from citypulse.models.insights import CityMetrics, SocialPost
from citypulse.services.city_assistant import (
    GENERAL,
    MAX_CONTEXT_REPORTS,
    UNAVAILABLE_ANSWER,
    ask_city_assistant,
    build_context_prompt,
    extract_city,
    get_question_type,
    no_answer,
)
from citypulse.services.social_feed import analyze_social_feed, extract_topics


@pytest.fixture
def delhi_metrics():
    return CityMetrics(city="Delhi", temperature=31.5, humidity=40, aqi=182, population="Data not available")


class TestQuestionParsing:

    @pytest.mark.parametrize("question,expected", [
        ("What's happening in Pune?", "trends"),
        ("Any new trends today", "trends"),
        ("Is the AQI bad right now", "air_quality"),
        ("How is the air quality in Delhi", "air_quality"),
        ("Any congestion on the ring road?", "traffic"),
        ("What's the temperature like", "weather"),
        ("Where can I eat", GENERAL),
        ("", GENERAL),
    ])
    def test_question_type(self, question, expected):
        assert get_question_type(question) == expected

    @pytest.mark.parametrize("question,expected", [
        ("Traffic in bangalore?", "Bengaluru"),
        ("Is DELHI safe tonight", "Delhi"),
        ("Pune or Mumbai, which is hotter?", "Pune"),
        ("Rain in Bombay", "Mumbai"),
        ("Best Punerian cafes", GENERAL),
        ("", GENERAL),
    ])
    def test_extract_city(self, question, expected):
        assert extract_city(question) == expected


class TestContextPrompt:

    def test_reports_and_metrics(self, make_report, delhi_metrics):
        reports = [make_report(description="Jam at ITO"), make_report(description="  "),
                   make_report(description="Signal broken")]

        prompt = build_context_prompt("How is traffic?", reports, delhi_metrics)

        assert prompt.splitlines() == [
            "Question: How is traffic?",
            "Context: Recent reports: Jam at ITO. Signal broken",
            f"City metrics: AQI {delhi_metrics.aqi}, Temp 31.5°C",
        ]

    def test_without_context(self):
        assert build_context_prompt("Hello") == "Question: Hello\nContext: No recent reports."

    def test_unavailable_metrics_are_left_out(self):
        partial = CityMetrics(city="Agra", temperature=29.5, humidity=50, aqi="Data not available",
                              population="Data not available")
        missing = CityMetrics(city="Agra", temperature="Data not available", humidity="Data not available",
                              aqi="Data not available", population="Data not available")

        assert build_context_prompt("q", metrics=partial).endswith("\nCity metrics: Temp 29.5°C")
        assert "City metrics" not in build_context_prompt("q", metrics=missing)

    def test_report_context_is_capped(self, make_report):
        reports = [make_report(description=f"Report {i}") for i in range(MAX_CONTEXT_REPORTS + 5)]
        prompt = build_context_prompt("q", reports)
        assert f"Report {MAX_CONTEXT_REPORTS - 1}" in prompt
        assert f"Report {MAX_CONTEXT_REPORTS}" not in prompt


class TestAskCityAssistant:

    async def test_answer_from_summarizer(self, make_report, static_summarizer, delhi_metrics):
        reports = [make_report(description="Jam at ITO")]

        answer = await ask_city_assistant(" How bad is traffic in Delhi? ", reports, delhi_metrics, static_summarizer)

        assert answer.question == "How bad is traffic in Delhi?"
        assert (answer.question_type, answer.city) == ("traffic", "Delhi")
        assert answer.answer == "traffic reported in Delhi"
        assert answer.answered is True
        text, category, area = static_summarizer.calls[0]
        assert (category, area) == ("traffic", "Delhi")
        assert "Jam at ITO" in text
        assert f"AQI {delhi_metrics.aqi}" in text

    async def test_general_question_has_no_area(self, static_summarizer):
        answer = await ask_city_assistant("Hello there", summarizer=static_summarizer)
        assert answer.city == GENERAL
        assert static_summarizer.calls[0][2] is None

    async def test_explicit_city_wins(self, static_summarizer):
        answer = await ask_city_assistant("Weather in Delhi?", summarizer=static_summarizer, city="Mumbai")
        assert answer.city == "Mumbai"
        assert answer.answer == "weather reported in Mumbai"

    async def test_failing_summarizer_apologizes(self, failing_summarizer):
        answer = await ask_city_assistant("Traffic in Pune?", summarizer=failing_summarizer)
        assert answer.answer == UNAVAILABLE_ANSWER
        assert answer.answered is False

    async def test_empty_summary_means_not_enough_information(self):
        answer = await ask_city_assistant("AQI in Agra?", summarizer=lambda *args: {"summary": " "})
        assert answer.answer == no_answer("Agra")
        assert answer.answered is False

    async def test_deadline(self):
        async def slow(text, category, area):
            await asyncio.sleep(1)
            return {"summary": "too late"}

        answer = await ask_city_assistant("Traffic in Pune?", summarizer=slow, timeout_seconds=0.05)

        assert answer.answer == UNAVAILABLE_ANSWER


class TestSocialFeed:

    @pytest.mark.parametrize("text,expected", [
        ("Traffic jam on the main road", ["Traffic", "Infrastructure"]),
        ("Power cut and heavy smog", ["Power", "Air Quality"]),
        ("Metro-bus link delayed", ["Transport"]),
        ("Great cutlery shop", ["General"]),
        ("Lovely evening", ["General"]),
        ("", ["General"]),
    ])
    def test_extract_topics(self, text, expected):
        assert extract_topics(text) == expected

    def test_analyze_feed(self):
        posts = [
            SocialPost(text="Traffic jam again, so frustrating", location="Delhi", author="asha"),
            SocialPost(text=""),
        ]

        analyzed = analyze_social_feed(posts)

        assert [(p.sentiment, p.topics, p.analyzed) for p in analyzed] == [
            ("Frustrated", ["Traffic"], True),
            ("Neutral", ["General"], True),
        ]
        assert (analyzed[0].location, analyzed[0].author) == ("Delhi", "asha")

    def test_failed_post_falls_back_to_neutral(self):
        def sentiment(text):
            if "boom" in text:
                raise RuntimeError("lexicon unavailable")
            return "Positive"

        analyzed = analyze_social_feed([SocialPost(text="boom"), SocialPost(text="Clean streets")], sentiment)

        assert [(p.text, p.sentiment, p.topics, p.analyzed) for p in analyzed] == [
            ("boom", "Neutral", ["General"], False),
            ("Clean streets", "Positive", ["General"], True),
        ]
