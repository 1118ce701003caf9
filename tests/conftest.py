"""Shared fixtures: settings, provider records and a fake HTTP backend."""
import httpx
import pytest

from nearnow.config import Settings

API_HOST = "api.test"
GEO_HOST = "geo.test"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_base=f"https://{API_HOST}/v1",
        api_token="test-token",
        geocoder_url=f"https://{GEO_HOST}/search",
        saved_events_path=tmp_path / "saved_events.json",
    )


def _make_record(**overrides):
    """A PredictHQ record with the fields most events carry."""
    record = {
        "id": "evt1",
        "title": "Jazz Night",
        "description": "Live jazz downtown",
        "category": "concerts",
        "labels": ["music", "jazz"],
        "start": "2025-01-15T19:00:00Z",
        "end": "2025-01-15T22:00:00Z",
        "timezone": "America/New_York",
        "location": [
            {
                "location": {"lat": 40.7128, "lon": -74.006},
                "address": {
                    "name": "Blue Note",
                    "street": "131 W 3rd St",
                    "locality": "New York",
                    "region": "NY",
                    "country": "US",
                },
            }
        ],
        "country": "US",
        "private": False,
        "rank": 80,
    }
    record.update(overrides)
    return record


class FakeBackend:
    """
    Stands in for both the provider and the geocoder.

    ``events`` maps an id to its record for id lookups; ``search_results`` is
    returned for searches. ``status`` overrides let a test fail specific ids.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.search_results: list[dict] = []
        self.events: dict[str, dict] = {}
        self.id_status: dict[str, int] = {}
        self.geocode_matches: list[dict] = []
        self.geocode_status = 200
        self.provider_response: httpx.Response | None = None  # Canned reply for every provider call

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == GEO_HOST:
            return httpx.Response(self.geocode_status, json=self.geocode_matches)

        if self.provider_response is not None:
            return self.provider_response

        event_id = request.url.params.get("id")
        if event_id is not None:
            if event_id in self.id_status:
                return httpx.Response(self.id_status[event_id], json={"detail": "boom"})
            record = self.events.get(event_id)
            results = [record] if record else []
            return httpx.Response(200, json={"count": len(results), "results": results})

        return httpx.Response(200, json={"count": len(self.search_results), "results": self.search_results})

    @property
    def geocode_requests(self):
        return [r for r in self.requests if r.url.host == GEO_HOST]

    @property
    def provider_requests(self):
        return [r for r in self.requests if r.url.host == API_HOST]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def make_record():
    return _make_record
