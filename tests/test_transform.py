"""Tests for mapping PredictHQ records onto Event."""
from urllib.parse import quote

import pytest

from nearnow.transform import city_from_formatted_address, search_url, transform_event


def test_basic_fields(make_record):
    event = transform_event(make_record())

    assert event.id == "evt1"
    assert event.name == "Jazz Night"
    assert event.description == "Live jazz downtown"
    assert event.start_date == "2025-01-15T19:00:00Z"
    assert event.end_date == "2025-01-15T22:00:00Z"
    assert event.timezone == "America/New_York"
    assert event.category == "concerts"
    assert event.price is None
    assert event.image_url is None
    assert event.is_online is False


def test_venue_entity_formatted_address():
    record = {
        "id": "e1",
        "title": "Fair",
        "start": "2025-05-01T10:00:00Z",
        "entities": [
            {"entity_id": "v1", "name": "Town Hall", "type": "venue",
             "formatted_address": "123 Main St, Springfield, USA"}
        ],
    }
    event = transform_event(record)

    assert event.venue is not None
    assert event.venue.name == "Town Hall"
    assert event.venue.address == "123 Main St, Springfield, USA"
    assert event.venue.city == "Springfield"


def test_address_built_from_parts(make_record):
    event = transform_event(make_record())

    assert event.venue.name == "Blue Note"
    assert event.venue.address == "131 W 3rd St, New York, NY, US"
    assert event.venue.city == "New York"
    assert event.venue.latitude == 40.7128
    assert event.venue.longitude == -74.006


def test_address_parts_skip_missing_and_use_top_level_country(make_record):
    record = make_record(
        location=[{"location": {"lat": 1.0, "lon": 2.0}, "address": {"locality": "Accra"}}],
        country="GH",
    )
    assert transform_event(record).venue.address == "Accra, GH"


def test_address_name_used_when_distinct_from_venue(make_record):
    record = make_record(
        country=None,
        location=[{"location": {"lat": 1.0, "lon": 2.0}, "address": {"name": "Main Square"}}],
        entities=[{"name": "Big Stage", "type": "venue"}],
    )
    venue = transform_event(record).venue

    assert venue.name == "Big Stage"
    assert venue.address == "Main Square"


def test_address_falls_back_to_coordinates(make_record):
    record = make_record(country=None, location=[{"location": {"lat": 6.524379, "lon": 3.379206}}])
    venue = transform_event(record).venue

    assert venue.name == "Event Venue"
    assert venue.address == "6.5244, 3.3792"


def test_address_placeholder_when_nothing_known():
    record = {"id": "e2", "title": "Mystery", "start": "2025-01-01T00:00:00Z",
              "entities": [{"name": "Secret Club", "type": "venue"}]}
    venue = transform_event(record).venue

    assert venue.name == "Secret Club"
    assert venue.address == "Location available"
    assert venue.latitude is None


def test_coordinates_from_geometry(make_record):
    record = make_record(location=None, geo={"geometry": {"type": "Point", "coordinates": [-0.1276, 51.5072]}})
    venue = transform_event(record).venue

    assert venue.latitude == 51.5072
    assert venue.longitude == -0.1276


def test_coordinates_from_bare_location_pair(make_record):
    record = make_record(location=[-0.1276, 51.5072])
    venue = transform_event(record).venue

    assert (venue.latitude, venue.longitude) == (51.5072, -0.1276)


def test_no_venue_without_location_data():
    record = {"id": "e3", "title": "Webinar", "start": "2025-01-01T00:00:00Z"}
    assert transform_event(record).venue is None


@pytest.mark.parametrize("entities", [5, True, {"name": "Arena", "type": "venue"}, "Arena"])
def test_entities_of_wrong_type_are_ignored(make_record, entities):
    event = transform_event(make_record(entities=entities))

    assert event.venue.name == "Blue Note"
    assert event.venue.address == "131 W 3rd St, New York, NY, US"


def test_url_priority(make_record):
    record = make_record(
        ticket_url="https://tickets.example/1",
        external_url="https://external.example/1",
        url="https://generic.example/1",
        website="https://site.example",
    )
    assert transform_event(record).url == "https://tickets.example/1"

    del record["ticket_url"]
    assert transform_event(record).url == "https://external.example/1"

    del record["external_url"]
    assert transform_event(record).url == "https://generic.example/1"

    del record["url"]
    assert transform_event(record).url == "https://site.example"


def test_url_from_entity(make_record):
    record = make_record(entities=[
        {"name": "Promoter", "type": "organizer"},
        {"name": "Arena", "type": "venue", "website": "https://arena.example"},
    ])
    assert transform_event(record).url == "https://arena.example"


def test_url_fallback_is_search_query(make_record):
    event = transform_event(make_record())

    assert event.url == "https://www.google.com/search?q=" + quote("Jazz Night tickets New York")
    assert event.url == search_url("Jazz Night", "New York")


def test_url_fallback_without_city():
    event = transform_event({"id": "e4", "title": "Pop Up", "start": "2025-01-01T00:00:00Z"})
    assert event.url == "https://www.google.com/search?q=Pop%20Up%20tickets"


def test_missing_fields_degrade_to_defaults():
    event = transform_event({"id": 42})

    assert event.id == "42"
    assert event.name == "Untitled event"
    assert event.description == ""
    assert event.timezone == "UTC"
    assert event.url


def test_end_defaults_to_start(make_record):
    record = make_record()
    del record["end"]
    assert transform_event(record).end_date == record["start"]


def test_online_label(make_record):
    assert transform_event(make_record(labels=["virtual", "conference"])).is_online is True
    assert transform_event(make_record(phq_labels=[{"label": "online", "weight": 1}])).is_online is True


def test_outbound_shape(make_record):
    outbound = transform_event(make_record()).to_outbound()

    assert outbound["startDate"] == "2025-01-15T19:00:00Z"
    assert outbound["isOnline"] is False
    assert "imageUrl" not in outbound
    assert "price" not in outbound
    assert outbound["venue"]["city"] == "New York"


def test_city_from_formatted_address():
    assert city_from_formatted_address("1 Rue X, Paris, France") == "Paris"
    assert city_from_formatted_address("Somewhere") is None
    assert city_from_formatted_address(None) is None
