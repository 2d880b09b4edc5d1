"""
Request and response models for the read-only insight services (area
summaries, digests, notifications, mood map, city assistant, social feed)
and city lookups.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional, Union

from citypulse.models.event import Alert


class AreaSummary(BaseModel):
    area: str
    summary: str
    top_issues: List[str] = Field(default_factory=list)
    mood_trend: str = "Neutral"
    report_count: int = 0
    predictive_alerts: List[Alert] = Field(default_factory=list)


class CityDigest(BaseModel):
    city: str
    summary: str
    top_events: List[str] = Field(default_factory=list)
    mood_trend: str = "Neutral"
    key_alerts: List[str] = Field(default_factory=list)
    report_count: int = 0
    generated_at: Optional[datetime] = None
    error: bool = False


class NotificationPreferences(BaseModel):
    """User subscription filters; an empty list means no filtering."""
    locations: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class Notification(BaseModel):
    title: str
    message: str
    timestamp: datetime
    type: str


class MoodEntry(BaseModel):
    location: str
    sentiment: str
    emotion: str
    count: int


class NearestCity(BaseModel):
    name: str
    lat: float
    lon: float
    distance_km: float


MetricValue = Union[float, int, str]


class CityMetrics(BaseModel):
    """Live city metrics; unavailable values carry the DATA_NOT_AVAILABLE marker."""
    city: str
    temperature: MetricValue
    humidity: MetricValue
    aqi: MetricValue
    population: MetricValue
    tips: List[str] = Field(default_factory=list)


class AssistantQuestion(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    city: Optional[str] = Field(None, description="Overrides the city detected in the question")


class AssistantAnswer(BaseModel):
    question: str
    question_type: str
    city: str
    answer: str
    answered: bool = False


class SocialPost(BaseModel):
    text: str = ""
    location: Optional[str] = None
    author: Optional[str] = None


class AnalyzedPost(SocialPost):
    sentiment: str = "Neutral"
    topics: List[str] = Field(default_factory=list)
    analyzed: bool = False
