"""
Major Indian cities with coordinates, used for nearest-city lookup and
city metrics. Extend as coverage grows.
"""

from typing import Dict, List, Optional

INDIAN_CITIES: List[Dict] = [
    {"name": "Delhi", "lat": 28.6139, "lon": 77.2090},
    {"name": "Mumbai", "lat": 19.0760, "lon": 72.8777},
    {"name": "Bengaluru", "lat": 12.9716, "lon": 77.5946},
    {"name": "Kolkata", "lat": 22.5726, "lon": 88.3639},
    {"name": "Chennai", "lat": 13.0827, "lon": 80.2707},
    {"name": "Hyderabad", "lat": 17.3850, "lon": 78.4867},
    {"name": "Pune", "lat": 18.5204, "lon": 73.8567},
    {"name": "Ahmedabad", "lat": 23.0225, "lon": 72.5714},
    {"name": "Jaipur", "lat": 26.9124, "lon": 75.7873},
    {"name": "Lucknow", "lat": 26.8467, "lon": 80.9462},
    {"name": "Surat", "lat": 21.1702, "lon": 72.8311},
    {"name": "Kanpur", "lat": 26.4499, "lon": 80.3319},
    {"name": "Nagpur", "lat": 21.1458, "lon": 79.0882},
    {"name": "Indore", "lat": 22.7196, "lon": 75.8577},
    {"name": "Bhopal", "lat": 23.2599, "lon": 77.4126},
    {"name": "Patna", "lat": 25.5941, "lon": 85.1376},
    {"name": "Vadodara", "lat": 22.3072, "lon": 73.1812},
    {"name": "Ghaziabad", "lat": 28.6692, "lon": 77.4538},
    {"name": "Ludhiana", "lat": 30.9000, "lon": 75.8573},
    {"name": "Agra", "lat": 27.1767, "lon": 78.0081},
]

DEFAULT_CITY_NAME = "Delhi"

CITY_TIPS: Dict[str, str] = {
    "Mumbai": "Coastal flooding is a concern during monsoons. Stay updated on weather alerts.",
    "Delhi": "High AQI in winter. Use masks and avoid outdoor activity on smoggy days.",
    "Bengaluru": "Traffic congestion is common. Use public transport when possible.",
    "Kolkata": "Prepare for heavy rains during monsoon. Watch for waterlogging.",
    "Chennai": "Cyclones can affect the city. Follow official advisories during storms.",
    "Hyderabad": "Summer heat can be intense. Stay hydrated and avoid peak sun hours.",
    "Pune": "Air quality is generally good, but check AQI during winter.",
    "Ahmedabad": "Extreme heat in summer. Use sun protection and stay indoors at noon.",
    "Jaipur": "Desert climate means hot days and cool nights. Dress accordingly.",
    "Lucknow": "Fog can disrupt travel in winter. Plan accordingly.",
}


def find_city(name: Optional[str]) -> Optional[Dict]:
    """Case-insensitive lookup by city name."""
    if not name or not isinstance(name, str):
        return None
    wanted = name.strip().lower()
    for city in INDIAN_CITIES:
        if city["name"].lower() == wanted:
            return city
    return None
