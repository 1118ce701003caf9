"""Configuration for the event search client.

Values come from environment variables. A ``.env`` file in the working
directory is loaded first when present.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .errors import ConfigurationError

DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_SAVED_EVENTS_PATH = Path.home() / ".nearnow" / "saved_events.json"


class Settings(BaseModel):
    """Runtime settings for the provider, geocoder and local storage."""
    api_base: Optional[str] = None
    api_token: Optional[str] = None
    geocoder_url: str = DEFAULT_GEOCODER_URL
    user_agent: str = "nearnow/1.0"  # Nominatim rejects anonymous clients
    request_timeout: float = 30.0
    default_city: str = "New York"
    search_limit: int = 50
    popular_limit: int = 12
    cache_ttl: int = 3600
    cache_maxsize: int = 500
    saved_events_path: Path = DEFAULT_SAVED_EVENTS_PATH
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from the process environment."""
        if dotenv:
            load_dotenv()

        optional = {
            "geocoder_url": os.getenv("NEARNOW_GEOCODER_URL"),
            "user_agent": os.getenv("NEARNOW_USER_AGENT"),
            "request_timeout": os.getenv("NEARNOW_REQUEST_TIMEOUT"),
            "default_city": os.getenv("NEARNOW_DEFAULT_CITY"),
            "cache_ttl": os.getenv("NEARNOW_CACHE_TTL"),
            "log_level": os.getenv("NEARNOW_LOG_LEVEL"),
        }
        saved_path = os.getenv("NEARNOW_SAVED_EVENTS_PATH")
        if saved_path:
            optional["saved_events_path"] = Path(saved_path).expanduser()

        # Unset optional variables keep the model defaults
        return cls(
            api_base=os.getenv("PREDICTHQ_API_BASE") or None,
            api_token=os.getenv("PREDICTHQ_API_TOKEN") or None,
            **{k: v for k, v in optional.items() if v},
        )

    @property
    def events_url(self) -> str:
        return f"{(self.api_base or '').rstrip('/')}/events/"


@dataclass
class ConfigStatus:
    """Outcome of validating settings before any network call."""
    ok: bool
    missing: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)


def validate_settings(settings: Settings) -> ConfigStatus:
    """Check that the provider can be called with these settings."""
    missing = []
    messages = []

    if not settings.api_token:
        missing.append("PREDICTHQ_API_TOKEN")
        messages.append(
            "PredictHQ API token is not configured. "
            "Set PREDICTHQ_API_TOKEN in your environment or .env file."
        )
    if not settings.api_base:
        missing.append("PREDICTHQ_API_BASE")
        messages.append(
            "PredictHQ API base URL is not configured. "
            "Set PREDICTHQ_API_BASE in your environment or .env file."
        )

    return ConfigStatus(ok=not missing, missing=missing, messages=messages)


def require_valid(settings: Settings) -> None:
    """Raise ConfigurationError unless the settings can reach the provider."""
    status = validate_settings(settings)
    if not status.ok:
        raise ConfigurationError(" ".join(status.messages))
