"""
Pydantic models for citizen reports.

Reports are read-only inputs to the aggregation pipeline. They are created
by the reporting flow (dashboard, Firestore) and never mutated here.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, Optional, Union

from citypulse.utils.timestamps import normalize_timestamp


class ReportLocation(BaseModel):
    """Structured location as sent by the dashboard's location picker."""
    city: Optional[str] = None
    area: Optional[str] = None

    class Config:
        frozen = True
        extra = "ignore"


class Report(BaseModel):
    """
    A single citizen submission.

    ``timestamp`` is normalized at construction: ISO strings, datetimes,
    epoch milliseconds and ``{seconds: ...}`` wrappers all become an aware
    UTC datetime. Unparsable values become None instead of failing
    validation, so one bad record never rejects a batch.
    """
    id: Optional[str] = Field(None, description="Opaque unique identifier")
    description: str = Field("", description="What the citizen observed")
    category: Optional[str] = Field(None, description="User-selected category")
    ai_tag: Optional[str] = Field(None, alias="aiTag", description="AI-assigned tag (preferred over category)")
    location: Union[ReportLocation, str, None] = Field(None, description="Area/city string or {city, area}")
    city: Optional[str] = Field(None, description="Flat city field used by older reports")
    timestamp: Optional[datetime] = Field(None, description="When the report was made (UTC)")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("category", "ai_tag", "city", mode="before")
    @classmethod
    def _drop_non_strings(cls, value: Any) -> Optional[str]:
        # Upstream tags are uncontrolled; anything that is not text is treated as absent
        return value if isinstance(value, str) else None

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, value: Any) -> Any:
        if isinstance(value, (str, dict, ReportLocation)):
            return value
        return None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value: Any) -> Optional[datetime]:
        return normalize_timestamp(value)

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "id": "r-101",
                "description": "Heavy traffic jam near Connaught Place",
                "aiTag": "Traffic",
                "category": "Traffic",
                "location": {"city": "Delhi", "area": "Connaught Place"},
                "timestamp": "2024-01-15T10:30:00Z",
            }
        }
