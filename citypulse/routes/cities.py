"""
City endpoints - supported cities, nearest-city lookup and live metrics.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from citypulse.data.indian_cities import INDIAN_CITIES
from citypulse.models.insights import CityMetrics, NearestCity
from citypulse.services.city_metrics_service import CityMetricsService, CityNotFoundError, get_city_metrics_service
from citypulse.services.location_detector import find_nearest_city, get_default_location


router = APIRouter(prefix="/cities", tags=["Cities"])


@router.get("", response_model=List[str])
async def list_cities():
    """Names of all supported cities."""
    return [city["name"] for city in INDIAN_CITIES]


@router.get("/default", response_model=NearestCity)
async def default_city():
    """City used when the user's location is unknown."""
    return get_default_location()


@router.get("/nearest", response_model=NearestCity)
async def nearest_city(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude"),
):
    """Nearest supported city to a coordinate pair."""
    city = find_nearest_city(lat, lon)
    if city is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid coordinates")
    return city


@router.get("/{city}/metrics", response_model=CityMetrics)
def city_metrics(city: str, service: CityMetricsService = Depends(get_city_metrics_service)):
    """
    Live temperature, humidity, AQI and population.

    Unavailable values are returned as "Data not available".
    """
    try:
        return service.fetch_city_metrics(city)
    except CityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
