"""
Core settings and environment variables for CityPulse.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "CityPulse"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Dashboard URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Report source: "memory" (default, empty until populated) or "firestore"
    REPORT_SOURCE: str = "memory"
    REPORTS_COLLECTION: str = "reports"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Signal extraction defaults (callers may override per request)
    EVENT_WINDOW_MINUTES: int = 30
    ALERT_WINDOW_MINUTES: int = 60
    SPIKE_THRESHOLD: int = 3

    # Summarizer configuration
    AI_ENABLED: bool = True  # If False, only the rule-based summarizer is used
    AI_PROVIDER: str = "gemini"  # "gemini" or "mock"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    AI_TIMEOUT_SECONDS: float = 10.0  # HTTP timeout for a single provider request
    AI_MAX_RETRIES: int = 2
    AI_RETRY_BACKOFF_SECONDS: float = 0.5
    SUMMARIZER_DEADLINE_SECONDS: Optional[float] = None  # Per-candidate deadline; unset means the summarizer's own timeout

    # City metrics (weather, AQI, population)
    OPENWEATHERMAP_API_KEY: Optional[str] = None
    WAQI_API_KEY: Optional[str] = None
    RAPIDAPI_KEY: Optional[str] = None
    METRICS_TIMEOUT_SECONDS: float = 5.0

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


# Global settings instance
settings = Settings()
