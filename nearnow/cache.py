"""In-memory event cache so detail lookups can skip the provider."""
from typing import Iterable, Optional

from cachetools import TTLCache

from .models import Event


class EventCache:
    """Events keyed by id, expiring after ``ttl`` seconds."""

    def __init__(self, maxsize: int = 500, ttl: int = 3600):
        self._events: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)

    def put(self, event: Event) -> None:
        self._events[event.id] = event

    def put_many(self, events: Iterable[Event]) -> None:
        for event in events:
            self.put(event)

    def get(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    def remove(self, event_id: str) -> None:
        self._events.pop(event_id, None)

    def clear(self) -> None:
        self._events.clear()

    def __contains__(self, event_id: str) -> bool:
        return event_id in self._events

    def __len__(self) -> int:
        return len(self._events)
