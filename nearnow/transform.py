"""
Map PredictHQ event records onto the internal Event model.

Provider records are semi-structured: any field may be missing and several
fields overlap (multiple URL sources, multiple address sources). Each output
field is resolved by an ordered list of rules; the first rule that yields a
value wins, and every field ends in a fallback so transforming never fails.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib.parse import quote

from .models import Event, Venue

logger = logging.getLogger(__name__)

DEFAULT_VENUE_NAME = "Event Venue"
DEFAULT_ADDRESS = "Location available"
DEFAULT_EVENT_NAME = "Untitled event"
SEARCH_URL = "https://www.google.com/search?q="

ONLINE_LABELS = {'online', 'virtual', 'livestream', 'webinar'}


@dataclass
class RecordContext:
    """Pieces of a provider record that the field rules look at."""
    record: dict[str, Any]
    address: dict[str, Any] = field(default_factory=dict)
    entities: list[dict[str, Any]] = field(default_factory=list)
    venue_entity: Optional[dict[str, Any]] = None
    address_entity: Optional[dict[str, Any]] = None
    coordinates: Optional[tuple[float, float]] = None  # (lat, lon)
    venue_name: str = DEFAULT_VENUE_NAME
    city: Optional[str] = None


Rule = Callable[[RecordContext], Optional[Any]]


def resolve(rules: list[Rule], ctx: RecordContext) -> Optional[Any]:
    """Return the first non-empty value produced by ``rules``."""
    for rule in rules:
        value = rule(ctx)
        if value:
            return value
    return None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _pair(lat: Any, lon: Any) -> Optional[tuple[float, float]]:
    lat, lon = _number(lat), _number(lon)
    if lat is None or lon is None:
        return None
    return lat, lon


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


# --- coordinates ---

def _coords_from_location_entry(ctx: RecordContext) -> Optional[tuple[float, float]]:
    locations = ctx.record.get("location")
    if isinstance(locations, list) and locations and isinstance(locations[0], dict):
        point = _as_dict(locations[0].get("location"))
        return _pair(point.get("lat"), point.get("lon"))
    return None


def _coords_from_location_pair(ctx: RecordContext) -> Optional[tuple[float, float]]:
    # PredictHQ also sends location as a bare [lon, lat] pair
    locations = ctx.record.get("location")
    if isinstance(locations, list) and len(locations) == 2:
        return _pair(locations[1], locations[0])
    return None


def _coords_from_geometry(ctx: RecordContext) -> Optional[tuple[float, float]]:
    geometry = _as_dict(_as_dict(ctx.record.get("geo")).get("geometry"))
    coordinates = geometry.get("coordinates")
    if isinstance(coordinates, list) and len(coordinates) >= 2:
        return _pair(coordinates[1], coordinates[0])
    return None


COORDINATE_RULES: list[Rule] = [
    _coords_from_location_entry,
    _coords_from_location_pair,
    _coords_from_geometry,
]


# --- venue name ---

VENUE_NAME_RULES: list[Rule] = [
    lambda ctx: _text(_as_dict(ctx.venue_entity).get("name")),
    lambda ctx: _text(_as_dict(ctx.address_entity).get("name")),
    lambda ctx: _text(ctx.address.get("name")),
]


# --- address ---

def _address_from_entity(ctx: RecordContext) -> Optional[str]:
    return (
        _text(_as_dict(ctx.address_entity).get("formatted_address"))
        or _text(_as_dict(ctx.venue_entity).get("formatted_address"))
    )


def _address_from_parts(ctx: RecordContext) -> Optional[str]:
    parts = [
        _text(ctx.address.get("street")),
        _text(ctx.address.get("locality")),
        _text(ctx.address.get("region")),
        _text(ctx.address.get("country")) or _text(ctx.record.get("country")),
    ]
    parts = [p for p in parts if p]
    return ", ".join(parts) if parts else None


def _address_from_name(ctx: RecordContext) -> Optional[str]:
    name = _text(ctx.address.get("name"))
    if name and name != ctx.venue_name:
        return name
    return None


def _address_from_coordinates(ctx: RecordContext) -> Optional[str]:
    if ctx.coordinates is None:
        return None
    lat, lon = ctx.coordinates
    return f"{lat:.4f}, {lon:.4f}"


ADDRESS_RULES: list[Rule] = [
    _address_from_entity,
    _address_from_parts,
    _address_from_name,
    lambda ctx: _text(ctx.record.get("country")),
    _address_from_coordinates,
]


# --- city ---

def city_from_formatted_address(formatted: Optional[str]) -> Optional[str]:
    """Second-to-last comma separated segment, usually the city before the country."""
    if not formatted:
        return None
    parts = [p.strip() for p in formatted.split(",")]
    if len(parts) >= 2:
        return parts[-2] or None
    return None


CITY_RULES: list[Rule] = [
    lambda ctx: _text(ctx.address.get("locality")),
    lambda ctx: city_from_formatted_address(_text(_as_dict(ctx.venue_entity).get("formatted_address"))),
    lambda ctx: city_from_formatted_address(_text(_as_dict(ctx.address_entity).get("formatted_address"))),
]


# --- url ---

def _url_from_entities(ctx: RecordContext) -> Optional[str]:
    for entity in ctx.entities:
        url = _text(entity.get("url")) or _text(entity.get("website"))
        if url:
            return url
    return None


URL_RULES: list[Rule] = [
    lambda ctx: _text(ctx.record.get("ticket_url")),
    lambda ctx: _text(ctx.record.get("external_url")),
    lambda ctx: _text(ctx.record.get("url")),
    lambda ctx: _text(ctx.record.get("website")),
    _url_from_entities,
]


def search_url(title: str, city: Optional[str]) -> str:
    """Search-engine URL for finding tickets when the provider gives no link."""
    terms = f"{title} tickets {city or ''}".strip()
    return SEARCH_URL + quote(terms, safe="-_.!~*'()")


def _is_online(record: dict[str, Any]) -> bool:
    labels = []
    for key in ("labels", "phq_labels"):
        values = record.get(key)
        if isinstance(values, list):
            for value in values:
                # phq_labels entries are {"label": ..., "weight": ...}
                label = value.get("label") if isinstance(value, dict) else value
                if isinstance(label, str):
                    labels.append(label.lower())
    return any(label in ONLINE_LABELS for label in labels)


def build_context(record: dict[str, Any]) -> RecordContext:
    """Pull the nested pieces out of a record once, before rules run."""
    locations = record.get("location")
    address = {}
    if isinstance(locations, list) and locations and isinstance(locations[0], dict):
        address = _as_dict(locations[0].get("address"))

    raw_entities = record.get("entities")
    entities = [e for e in raw_entities if isinstance(e, dict)] if isinstance(raw_entities, list) else []
    venue_entity = next((e for e in entities if e.get("type") == "venue"), None)
    address_entity = next((e for e in entities if _text(e.get("formatted_address"))), None) or venue_entity

    ctx = RecordContext(
        record=record,
        address=address,
        entities=entities,
        venue_entity=venue_entity,
        address_entity=address_entity,
    )
    ctx.coordinates = resolve(COORDINATE_RULES, ctx)
    ctx.venue_name = resolve(VENUE_NAME_RULES, ctx) or DEFAULT_VENUE_NAME
    ctx.city = resolve(CITY_RULES, ctx)
    return ctx


def transform_event(record: dict[str, Any]) -> Event:
    """Convert one PredictHQ record into an Event. Never raises on missing fields."""
    ctx = build_context(record)

    title = _text(record.get("title")) or DEFAULT_EVENT_NAME
    start = _text(record.get("start")) or ""

    url = resolve(URL_RULES, ctx) or search_url(title, ctx.city or _text(ctx.address.get("locality")))

    venue = None
    if ctx.coordinates is not None or ctx.address or ctx.venue_entity is not None:
        venue = Venue(
            name=ctx.venue_name,
            address=resolve(ADDRESS_RULES, ctx) or DEFAULT_ADDRESS,
            city=ctx.city,
            latitude=ctx.coordinates[0] if ctx.coordinates else None,
            longitude=ctx.coordinates[1] if ctx.coordinates else None,
        )

    return Event(
        id=str(record.get("id") or ""),
        name=title,
        description=_text(record.get("description")) or "",
        start_date=start,
        end_date=_text(record.get("end")) or start,
        timezone=_text(record.get("timezone")) or "UTC",
        url=url,
        image_url=None,  # Provider has no event images
        venue=venue,
        price=None,  # Provider has no pricing in this integration
        category=_text(record.get("category")),
        is_online=_is_online(record),
    )
