"""
Persistent storage for the user's saved events.

Only event ids are stored; full events are fetched again when needed.
File layout:

    {"saved_event_ids": ["id-1", "id-2"]}

Every call reads the file, changes it and writes it back, so concurrent
writers follow last-write-wins.
"""
import json
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

SAVED_EVENTS_KEY = "saved_event_ids"


class SavedEventStore:
    """Ordered set of saved event ids backed by a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> dict[str, None]:
        # dict keeps insertion order and gives O(1) membership
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read saved events from {self.path}: {type(e).__name__}")
            return {}

        ids = data.get(SAVED_EVENTS_KEY, []) if isinstance(data, dict) else []
        if not isinstance(ids, list):
            return {}
        return {i.strip(): None for i in ids if isinstance(i, str) and i.strip()}

    def _write(self, ids: dict[str, None]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {SAVED_EVENTS_KEY: list(ids)}
        self.path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    @staticmethod
    def _normalize(event_id: str) -> str:
        event_id = (event_id or "").strip()
        if not event_id:
            raise ValueError("Event id must not be empty")
        return event_id

    def ids(self) -> list[str]:
        return list(self._load())

    def is_saved(self, event_id: str) -> bool:
        return event_id.strip() in self._load()

    def save(self, event_id: str) -> bool:
        """Add an id. Returns False when it was already saved."""
        event_id = self._normalize(event_id)
        ids = self._load()
        if event_id in ids:
            return False
        ids[event_id] = None
        self._write(ids)
        return True

    def remove(self, event_id: str) -> bool:
        """Drop an id. Returns False when it was not saved."""
        event_id = self._normalize(event_id)
        ids = self._load()
        if event_id not in ids:
            return False
        del ids[event_id]
        self._write(ids)
        return True

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def __contains__(self, event_id: str) -> bool:
        return self.is_saved(event_id)

    def __len__(self) -> int:
        return len(self._load())
