"""Build PredictHQ query parameters from search filters."""
import logging
import math
from datetime import datetime, timezone
from typing import Optional, Union

import httpx

from .config import Settings
from .geocoder import geocode_location
from .models import EventFilters, GeocodeResult

logger = logging.getLogger(__name__)

KM_PER_MILE = 1.60934

# Default radii in miles
DEFAULT_SEARCH_RADIUS = 25
POPULAR_SEARCH_RADIUS = 50
COUNTRY_RADIUS = 300  # ~483km
CITY_RADIUS = 30  # ~48km

RESULT_LIMIT = 50
SORT_ORDER = "-rank"  # Most popular first


def miles_to_km(miles: float) -> int:
    """Convert miles to whole kilometers, rounding halves up."""
    return int(math.floor(miles * KM_PER_MILE + 0.5))


def format_timestamp(value: Union[datetime, str]) -> str:
    """Render a timestamp the way the provider expects (UTC, millisecond Z form)."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def needs_geocoding(filters: EventFilters) -> bool:
    return bool(filters.city) and not filters.has_coordinates


def build_query_params(
    filters: EventFilters,
    geocode: Optional[GeocodeResult] = None,
    default_radius: float = DEFAULT_SEARCH_RADIUS,
    limit: int = RESULT_LIMIT,
    now: Optional[datetime] = None,
) -> dict[str, str]:
    """
    Assemble provider query parameters.

    Explicit coordinates win over the city. When the city needs geocoding and
    ``geocode`` is None the lookup failed, so the city becomes a keyword.
    """
    params: dict[str, str] = {}
    keywords = []

    if filters.query:
        keywords.append(filters.query)

    origin = None
    # Zero or negative radius means "not given"
    radius = filters.radius if filters.radius and filters.radius > 0 else None

    if filters.has_coordinates:
        origin = (filters.latitude, filters.longitude)
        if radius is None:
            radius = default_radius
    elif filters.city:
        if geocode is not None:
            origin = (geocode.latitude, geocode.longitude)
            if radius is None:
                radius = COUNTRY_RADIUS if geocode.is_country else CITY_RADIUS
        else:
            keywords.append(filters.city)

    if origin is not None:
        params["location_around.origin"] = f"{origin[0]},{origin[1]}"
        params["location_around.radius"] = f"{miles_to_km(radius)}km"

    if filters.start_date:
        params["start.gte"] = format_timestamp(filters.start_date)
    else:
        params["start.gte"] = format_timestamp(now or datetime.now(timezone.utc))

    if filters.end_date:
        params["start.lte"] = format_timestamp(filters.end_date)

    if keywords:
        params["q"] = " ".join(keywords)

    if filters.category:
        params["category"] = filters.category

    if filters.price and (filters.price.min is not None or filters.price.max is not None):
        # No price filter on the provider side
        logger.debug("Ignoring price band, provider does not filter by price")

    params["private"] = "false"
    params["limit"] = str(limit)
    params["sort"] = SORT_ORDER

    return params


async def build_search_params(
    client: httpx.AsyncClient,
    filters: EventFilters,
    settings: Settings,
    default_radius: float = DEFAULT_SEARCH_RADIUS,
) -> dict[str, str]:
    """Geocode the city when needed, then build the query parameters."""
    geocode = None
    if needs_geocoding(filters):
        geocode = await geocode_location(client, filters.city, settings)
        if geocode is None:
            logger.warning(f"Geocoding failed for '{filters.city}', falling back to keyword search")

    return build_query_params(filters, geocode, default_radius=default_radius, limit=settings.search_limit)
