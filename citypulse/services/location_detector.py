"""
Location Detector - nearest supported city for a coordinate pair.
"""

from typing import Dict, Optional
import logging

from citypulse.data.indian_cities import DEFAULT_CITY_NAME, INDIAN_CITIES, find_city
from citypulse.models.insights import NearestCity
from citypulse.utils.geo import haversine_km, valid_coordinates

logger = logging.getLogger(__name__)


def find_nearest_city(latitude: float, longitude: float) -> Optional[NearestCity]:
    """
    Haversine nearest neighbour over the bundled city list.

    Returns:
        NearestCity with distance in km, or None for invalid coordinates
    """
    if not valid_coordinates(latitude, longitude):
        logger.warning(f"Invalid coordinates for nearest-city lookup: ({latitude}, {longitude})")
        return None

    nearest: Optional[Dict] = None
    min_distance = float("inf")
    for city in INDIAN_CITIES:
        distance = haversine_km(latitude, longitude, city["lat"], city["lon"])
        if distance < min_distance:
            nearest, min_distance = city, distance

    if nearest is None:
        return None

    logger.debug(f"📍 Nearest city: {nearest['name']} ({min_distance:.1f}km away)")
    return NearestCity(name=nearest["name"], lat=nearest["lat"], lon=nearest["lon"], distance_km=round(min_distance, 3))


def get_default_location() -> NearestCity:
    """Delhi, or the first bundled city if Delhi is ever removed."""
    city = find_city(DEFAULT_CITY_NAME) or INDIAN_CITIES[0]
    return NearestCity(name=city["name"], lat=city["lat"], lon=city["lon"], distance_km=0.0)
