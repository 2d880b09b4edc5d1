"""
City Assistant - answers free-form questions about a city.

The question is typed by keyword and scanned for a supported city name.
The summarizer then answers from the city's recent reports and, when
available, its live metrics. A failing summarizer yields a polite
apology instead of an error.
"""

from typing import Dict, Iterable, Optional, Tuple
import logging
import re

from citypulse.data.indian_cities import INDIAN_CITIES
from citypulse.models.insights import AssistantAnswer, CityMetrics
from citypulse.models.report import Report
from citypulse.services.city_metrics_service import DATA_NOT_AVAILABLE
from citypulse.services.event_assembler import (
    DEFAULT_DEADLINE,
    SummarizerLike,
    request_summary,
    resolve_deadline,
)
from citypulse.services.summarizer.registry import get_summarizer

logger = logging.getLogger(__name__)


GENERAL = "general"

# First matching type wins
QUESTION_TYPES: Dict[str, Tuple[str, ...]] = {
    "trends": ("trend", "what's happening", "what is happening"),
    "air_quality": ("air quality", "aqi"),
    "traffic": ("traffic", "congestion"),
    "weather": ("weather", "temperature"),
}

CITY_ALIASES = {
    "bangalore": "Bengaluru",
    "bombay": "Mumbai",
    "calcutta": "Kolkata",
    "madras": "Chennai",
}

MAX_CONTEXT_REPORTS = 10

UNAVAILABLE_ANSWER = "I'm sorry, I'm having trouble processing your question right now. Please try again."


_CITY_NAMES: Dict[str, str] = {city["name"].lower(): city["name"] for city in INDIAN_CITIES}
_CITY_NAMES.update(CITY_ALIASES)
_CITY_RE = re.compile(
    r"\b(" + "|".join(re.escape(name) for name in sorted(_CITY_NAMES, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)


def no_answer(city: str) -> str:
    return f"I don't have enough information to answer that question about {city}."


def get_question_type(question: str) -> str:
    lowered = (question or "").lower()
    for question_type, phrases in QUESTION_TYPES.items():
        if any(phrase in lowered for phrase in phrases):
            return question_type
    return GENERAL


def extract_city(question: str) -> str:
    """First supported city named in the question (aliases allowed), else "general"."""
    match = _CITY_RE.search(question or "")
    return _CITY_NAMES[match.group(1).lower()] if match else GENERAL


def build_context_prompt(
    question: str,
    reports: Iterable[Report] = (),
    metrics: Optional[CityMetrics] = None,
) -> str:
    descriptions = [report.description for report in reports if report.description.strip()]
    context = f"Recent reports: {'. '.join(descriptions[:MAX_CONTEXT_REPORTS])}" if descriptions else "No recent reports."
    lines = [f"Question: {question}", f"Context: {context}"]
    if metrics is not None:
        readings = []
        if metrics.aqi != DATA_NOT_AVAILABLE:
            readings.append(f"AQI {metrics.aqi}")
        if metrics.temperature != DATA_NOT_AVAILABLE:
            readings.append(f"Temp {metrics.temperature}°C")
        if readings:
            lines.append(f"City metrics: {', '.join(readings)}")
    return "\n".join(lines)


async def ask_city_assistant(
    question: str,
    reports: Iterable[Report] = (),
    metrics: Optional[CityMetrics] = None,
    summarizer: Optional[SummarizerLike] = None,
    city: Optional[str] = None,
    timeout_seconds: Optional[float] = DEFAULT_DEADLINE,
) -> AssistantAnswer:
    """
    Answer a question about a city.

    Args:
        question: Free-form user question
        reports: Recent reports used as context (already filtered to the city)
        metrics: Live city metrics, if known
        summarizer: Summarizer adapter or callable; defaults to the registry
        city: Explicit city; detected from the question when omitted
        timeout_seconds: Per-call deadline; None disables it

    Returns:
        AssistantAnswer with ``answered`` False for every fallback reply
    """
    question = question.strip()
    question_type = get_question_type(question)
    city = city or extract_city(question)
    summarizer = summarizer if summarizer is not None else get_summarizer()

    result = await request_summary(
        summarizer,
        build_context_prompt(question, reports, metrics),
        question_type,
        None if city == GENERAL else city,
        resolve_deadline(summarizer, timeout_seconds),
    )

    if result is None:
        logger.warning(f"⚠️ City assistant could not answer a {question_type} question about {city}")
        answer, answered = UNAVAILABLE_ANSWER, False
    elif not result.summary.strip():
        answer, answered = no_answer(city), False
    else:
        answer, answered = result.summary.strip(), True

    return AssistantAnswer(
        question=question,
        question_type=question_type,
        city=city,
        answer=answer,
        answered=answered,
    )
