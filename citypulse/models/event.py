"""
Models for the signal extraction pipeline: bucket keys, candidate events,
synthesized events and alerts.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import List, Literal, NamedTuple, Optional, Tuple

from citypulse.models.report import Report

Severity = Literal["Low", "Medium", "High"]
SEVERITY_LEVELS = ("Low", "Medium", "High")
DEFAULT_SEVERITY: Severity = "Medium"


class BucketKey(NamedTuple):
    """Canonical grouping key of a bucket."""
    location: str
    category: str


class CandidateEvent(BaseModel):
    """
    A bucket that met the spike threshold.

    Invariant: count == len(reports) >= 1, and sample_reports is a
    non-empty prefix of reports.
    """
    location_key: str
    category_key: str
    count: int
    sample_reports: Tuple[Report, ...]
    reports: Tuple[Report, ...]

    @model_validator(mode="after")
    def _check_counts(self) -> "CandidateEvent":
        if self.count != len(self.reports):
            raise ValueError(f"count ({self.count}) does not match number of reports ({len(self.reports)})")
        if self.count < 1:
            raise ValueError("a candidate event needs at least one report")
        if not self.sample_reports:
            raise ValueError("a candidate event needs at least one sample report")
        return self

    class Config:
        frozen = True


class SynthesizedEvent(BaseModel):
    """Final, user-facing event combining count, severity and summary."""
    area: str = Field(..., description="Canonical location key")
    category: str = Field(..., description="Canonical category key")
    summary: str
    count: int = Field(..., ge=1)
    severity: Severity = DEFAULT_SEVERITY
    timestamp: datetime = Field(..., description="When the event was synthesized")
    probability: Optional[float] = Field(None, ge=0.0, le=1.0)
    top_issues: List[str] = Field(default_factory=list)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "area": "Delhi",
                "category": "Traffic",
                "summary": "Heavy congestion reported around Connaught Place",
                "count": 4,
                "severity": "High",
                "timestamp": "2024-01-15T10:40:00Z",
                "probability": None,
                "top_issues": ["traffic", "congestion"],
            }
        }


class Alert(BaseModel):
    """Spike alert derived from the alert window."""
    type: str = Field(..., description="Category of the spike")
    area: str
    message: str
    severity: Severity = DEFAULT_SEVERITY
    count: int = Field(..., ge=1)
    timestamp: datetime
    impact: str = "Potential issue detected"
    probability: float = Field(..., ge=0.0, le=1.0)

    class Config:
        frozen = True
