"""
City Metrics Service - live weather, AQI and population for a city.

Three sequential fetches (OpenWeatherMap, WAQI, GeoDB Cities). Each one
fails independently: a failed or skipped fetch yields DATA_NOT_AVAILABLE
for its fields and never blocks the others.
"""

from typing import Any, Dict, Optional, Tuple
import logging

import requests

from citypulse.core.settings import settings
from citypulse.data.indian_cities import CITY_TIPS, find_city
from citypulse.models.insights import CityMetrics

logger = logging.getLogger(__name__)


DATA_NOT_AVAILABLE = "Data not available"

OPENWEATHERMAP_URL = "https://api.openweathermap.org/data/2.5/weather"
WAQI_URL_TEMPLATE = "https://api.waqi.info/feed/geo:{lat};{lon}/"
GEODB_URL = "https://wft-geo-db.p.rapidapi.com/v1/geo/cities"
GEODB_HOST = "wft-geo-db.p.rapidapi.com"


class CityNotFoundError(LookupError):
    """The city is not in the bundled city list."""


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _object(value: Any) -> Dict[str, Any]:
    """JSON payloads are untrusted; anything but an object reads as empty."""
    return value if isinstance(value, dict) else {}


class CityMetricsService:
    """Fetches city metrics with per-call timeouts and independent fallbacks."""

    def __init__(self, session: Optional[requests.Session] = None, timeout_seconds: Optional[float] = None):
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.METRICS_TIMEOUT_SECONDS

    def fetch_weather(self, lat: float, lon: float) -> Tuple[Any, Any]:
        """(temperature in °C, humidity in %), DATA_NOT_AVAILABLE on failure."""
        if not settings.OPENWEATHERMAP_API_KEY:
            logger.warning("[CityPulse] OpenWeatherMap API key is missing, skipping weather")
            return DATA_NOT_AVAILABLE, DATA_NOT_AVAILABLE

        try:
            response = self.session.get(
                OPENWEATHERMAP_URL,
                params={"lat": lat, "lon": lon, "appid": settings.OPENWEATHERMAP_API_KEY, "units": "metric"},
                timeout=self.timeout_seconds,
            )
            if response.status_code != 200:
                logger.warning(f"[CityPulse] OpenWeatherMap error: {response.status_code}")
                return DATA_NOT_AVAILABLE, DATA_NOT_AVAILABLE

            main = _object(_object(response.json()).get("main"))
            temperature = _number(main.get("temp"))
            humidity = _number(main.get("humidity"))
            return (
                temperature if temperature is not None else DATA_NOT_AVAILABLE,
                humidity if humidity is not None else DATA_NOT_AVAILABLE,
            )
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[CityPulse] OpenWeatherMap fetch error: {e}")
            return DATA_NOT_AVAILABLE, DATA_NOT_AVAILABLE

    def fetch_aqi(self, lat: float, lon: float) -> Any:
        if not settings.WAQI_API_KEY:
            logger.warning("[CityPulse] WAQI API key is missing, skipping AQI")
            return DATA_NOT_AVAILABLE

        try:
            response = self.session.get(
                WAQI_URL_TEMPLATE.format(lat=lat, lon=lon),
                params={"token": settings.WAQI_API_KEY},
                timeout=self.timeout_seconds,
            )
            data = _object(response.json())
            if data.get("status") == "ok":
                aqi = _number(_object(data.get("data")).get("aqi"))
                if aqi is not None:
                    return aqi
            logger.warning(f"[CityPulse] WAQI returned no valid data: {data.get('status')}")
            return DATA_NOT_AVAILABLE
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[CityPulse] WAQI fetch error: {e}")
            return DATA_NOT_AVAILABLE

    def fetch_population(self, lat: float, lon: float) -> Any:
        if not settings.RAPIDAPI_KEY:
            logger.warning("[CityPulse] RapidAPI key is missing, skipping population")
            return DATA_NOT_AVAILABLE

        try:
            response = self.session.get(
                GEODB_URL,
                params={"latitude": lat, "longitude": lon, "radius": 50, "limit": 1},
                headers={"X-RapidAPI-Key": settings.RAPIDAPI_KEY, "X-RapidAPI-Host": GEODB_HOST},
                timeout=self.timeout_seconds,
            )
            if response.status_code == 429:
                logger.error("[CityPulse] Population API rate limit hit (429)")
                return DATA_NOT_AVAILABLE
            if response.status_code != 200:
                logger.warning(f"[CityPulse] Population API error: {response.status_code}")
                return DATA_NOT_AVAILABLE

            cities = _object(response.json()).get("data")
            first = cities[0] if isinstance(cities, list) and cities else None
            population = _number(_object(first).get("population"))
            return population if population else DATA_NOT_AVAILABLE
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[CityPulse] Population API error: {e}")
            return DATA_NOT_AVAILABLE

    def fetch_city_metrics(self, city_name: str) -> CityMetrics:
        """
        Collect all metrics for a bundled city.

        Raises:
            CityNotFoundError: the city is not in the bundled list
        """
        city = find_city(city_name)
        if city is None:
            logger.warning(f"[CityPulse] City not found: {city_name}")
            raise CityNotFoundError(f"City not found: {city_name}")

        lat, lon = city["lat"], city["lon"]
        temperature, humidity = self.fetch_weather(lat, lon)
        aqi = self.fetch_aqi(lat, lon)
        population = self.fetch_population(lat, lon)

        metrics = CityMetrics(
            city=city["name"],
            temperature=temperature,
            humidity=humidity,
            aqi=aqi,
            population=population,
            tips=[CITY_TIPS[city["name"]]] if city["name"] in CITY_TIPS else [],
        )
        logger.info(f"[CityPulse] Metrics for {city['name']}: {metrics.model_dump(exclude={'tips'})}")
        return metrics


# Global service instance (singleton)
_city_metrics_service: Optional[CityMetricsService] = None


def get_city_metrics_service() -> CityMetricsService:
    global _city_metrics_service
    if _city_metrics_service is None:
        _city_metrics_service = CityMetricsService()
    return _city_metrics_service