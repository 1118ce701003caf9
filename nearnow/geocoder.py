"""
Place name geocoding via a Nominatim-compatible endpoint.
Free, no API key, but an identifying User-Agent is required.
"""
import logging
from typing import Any, Optional

import httpx

from .config import Settings
from .models import GeocodeResult

logger = logging.getLogger(__name__)

# Input substrings that force a country-scale radius.
# Known approximation: misclassifies plenty of real places, only a radius hint.
COUNTRY_KEYWORDS = [
    'nigeria',
    'country',
]

COUNTRY_IMPORTANCE_THRESHOLD = 0.3


def is_country_scale(match: dict[str, Any], location: str) -> bool:
    """Guess whether a geocoding match covers a whole country."""
    place_type = str(match.get("type") or "")
    place_class = match.get("class")
    location_lower = location.lower()

    if place_type == "country" or (place_class == "place" and place_type == "country"):
        return True

    importance = match.get("importance")
    if isinstance(importance, (int, float)) and importance < COUNTRY_IMPORTANCE_THRESHOLD:
        if "city" not in place_type and "town" not in place_type:
            return True

    if any(kw in location_lower for kw in COUNTRY_KEYWORDS):
        return True

    address = match.get("address")
    if not isinstance(address, dict):
        return False
    country = address.get("country")
    if address.get("country_code") and isinstance(country, str) and country and country.lower() in location_lower:
        return True

    return False


def _parse_coordinate(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return number


async def geocode_location(
    client: httpx.AsyncClient,
    location: str,
    settings: Settings,
) -> Optional[GeocodeResult]:
    """
    Resolve a city or country name to coordinates.

    Returns None when nothing usable comes back; a missing match is an
    expected outcome, not an error.
    """
    try:
        response = await client.get(
            settings.geocoder_url,
            params={
                "q": location,
                "format": "json",
                "limit": 1,
                "addressdetails": 1,
            },
            headers={"User-Agent": settings.user_agent},
            timeout=settings.request_timeout,
        )
    except httpx.HTTPError as e:
        logger.warning(f"Geocoding network error for '{location}': {type(e).__name__}")
        return None

    if response.status_code != 200:
        logger.warning(f"Geocoding failed for '{location}': HTTP {response.status_code}")
        return None

    try:
        matches = response.json()
    except ValueError:
        logger.warning(f"Geocoding returned invalid JSON for '{location}'")
        return None

    if not isinstance(matches, list) or not matches or not isinstance(matches[0], dict):
        logger.warning(f"No geocoding results found for '{location}'")
        return None

    match = matches[0]
    lat = _parse_coordinate(match.get("lat"))
    lon = _parse_coordinate(match.get("lon"))
    if lat is None or lon is None:
        logger.warning(f"Invalid coordinates from geocoding for '{location}'")
        return None

    result = GeocodeResult(latitude=lat, longitude=lon, is_country=is_country_scale(match, location))
    logger.info(f"Geocoded '{location}' to {lat},{lon} (country={result.is_country})")
    return result
