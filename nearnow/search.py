"""
Event search against the PredictHQ events API.

Pipeline: filters -> geocoding -> query parameters -> HTTP -> Event models.
Nothing is kept between calls unless an EventCache is attached, so a client
can be shared by concurrent callers.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Union

import httpx

from .cache import EventCache
from .config import Settings, require_valid
from .errors import (
    AuthenticationError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
    ProviderError,
    ServerError,
)
from .models import Event, EventFilters
from .query_builder import DEFAULT_SEARCH_RADIUS, POPULAR_SEARCH_RADIUS, build_search_params
from .transform import transform_event

logger = logging.getLogger(__name__)

FiltersInput = Union[EventFilters, dict[str, Any], None]


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Pull a human readable reason out of a provider error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("detail", "message", "error"):
        if body.get(key):
            return str(body[key])
    return None


def classify_response_error(response: httpx.Response, event_id: Optional[str] = None) -> ProviderError:
    """Map a non-success provider response onto a typed error."""
    status = response.status_code
    detail = _error_detail(response)
    base = f"PredictHQ API error: {detail}" if detail else f"PredictHQ API error: {status} {response.reason_phrase}".rstrip()

    if status in (401, 403):
        return AuthenticationError(
            f"Authentication failed. Please check your PredictHQ API token. {base}", status_code=status
        )
    if status == 404:
        if event_id is not None:
            return NotFoundError(
                f'Event not found. The event ID "{event_id}" may be invalid, the event may no longer '
                "be available, or it might be from a different API. Please try searching for events again.",
                status_code=status,
            )
        return NotFoundError(f"API endpoint not found. {base}", status_code=status)
    if status >= 500:
        return ServerError(f"PredictHQ API server error. {base}", status_code=status)
    return ProviderError(base, status_code=status)


class EventSearchClient:
    """Search, popular and lookup operations over the PredictHQ API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[EventCache] = None,
    ):
        self.settings = settings or Settings.from_env()
        self._client = client
        self.cache = cache

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
                yield client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_token}",
            "Accept": "application/json",
        }

    async def _fetch_results(
        self,
        client: httpx.AsyncClient,
        params: dict[str, str],
        event_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """GET the events endpoint and return the raw ``results`` records."""
        url = self.settings.events_url
        logger.info(f"Fetching PredictHQ events: {params}")

        try:
            response = await client.get(
                url, params=params, headers=self._headers(), timeout=self.settings.request_timeout
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                f"Failed to connect to PredictHQ API: {type(e).__name__} {e}. "
                "Please check your internet connection and API configuration."
            ) from e

        if not response.is_success:
            raise classify_response_error(response, event_id)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("PredictHQ API returned a response that is not valid JSON.") from e

        if not isinstance(data, dict):
            raise MalformedResponseError("PredictHQ API returned an unexpected response shape.")

        results = data.get("results")
        if results is None:
            return []
        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            raise MalformedResponseError("PredictHQ API returned an unexpected list of results.")

        logger.info(f"PredictHQ: {len(results)} of {data.get('count', len(results))} events")
        return results

    async def _search(self, filters: EventFilters, default_radius: float) -> list[Event]:
        require_valid(self.settings)

        async with self._http() as client:
            params = await build_search_params(client, filters, self.settings, default_radius=default_radius)
            records = await self._fetch_results(client, params)

        events = [transform_event(record) for record in records]
        if self.cache is not None:
            self.cache.put_many(events)
        return events

    async def search_events(self, filters: FiltersInput = None) -> list[Event]:
        """
        Search events matching the filters, most popular first.

        Returns an empty list when nothing matches.
        """
        if filters is None:
            filters = EventFilters()
        elif isinstance(filters, dict):
            filters = EventFilters.model_validate(filters)
        return await self._search(filters, default_radius=DEFAULT_SEARCH_RADIUS)

    async def get_popular_events(
        self,
        city: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> list[Event]:
        """Top events around a point or city, falling back to the default city."""
        if lat is not None and lon is not None:
            filters = EventFilters(latitude=lat, longitude=lon, radius=POPULAR_SEARCH_RADIUS)
        elif city:
            # Radius is picked from the geocoded place kind
            filters = EventFilters(city=city)
        else:
            filters = EventFilters(city=self.settings.default_city)

        events = await self._search(filters, default_radius=POPULAR_SEARCH_RADIUS)
        return events[:self.settings.popular_limit]

    async def _fetch_event(self, client: httpx.AsyncClient, event_id: str) -> Event:
        event_id = (event_id or "").strip()
        if not event_id:
            raise ValueError("Invalid event ID. Please check the ID and try again.")

        if self.cache is not None:
            cached = self.cache.get(event_id)
            if cached is not None:
                return cached

        records = await self._fetch_results(client, {"id": event_id}, event_id=event_id)
        if not records:
            raise NotFoundError(
                f'Event not found. The event ID "{event_id}" may be invalid or the event '
                "may no longer be available."
            )

        record = next((r for r in records if str(r.get("id")) == event_id), None)
        if record is None:
            raise NotFoundError(f'Event not found. The event ID "{event_id}" was not found in the API response.')

        event = transform_event(record)
        if self.cache is not None:
            self.cache.put(event)
        return event

    async def get_event_by_id(self, event_id: str) -> Event:
        """Fetch a single event. Raises NotFoundError when the provider has no such id."""
        require_valid(self.settings)

        async with self._http() as client:
            return await self._fetch_event(client, event_id)

    async def get_events_by_ids(self, event_ids: list[str]) -> list[Event]:
        """
        Fetch many events concurrently.

        A failed lookup is logged and left out; the successful ones are
        returned in input order.
        """
        require_valid(self.settings)
        if not event_ids:
            return []

        async with self._http() as client:
            results = await asyncio.gather(
                *(self._fetch_event(client, event_id) for event_id in event_ids),
                return_exceptions=True,
            )

        events = []
        for event_id, result in zip(event_ids, results):
            if isinstance(result, Event):
                events.append(result)
            else:
                logger.warning(f"Dropping event {event_id}: {type(result).__name__}")
        return events


async def search_events(filters: FiltersInput = None, settings: Optional[Settings] = None) -> list[Event]:
    return await EventSearchClient(settings).search_events(filters)


async def get_popular_events(
    city: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> list[Event]:
    return await EventSearchClient(settings).get_popular_events(city, lat, lon)


async def get_event_by_id(event_id: str, settings: Optional[Settings] = None) -> Event:
    return await EventSearchClient(settings).get_event_by_id(event_id)


async def get_events_by_ids(event_ids: list[str], settings: Optional[Settings] = None) -> list[Event]:
    return await EventSearchClient(settings).get_events_by_ids(event_ids)
