# Event search client for the PredictHQ events API
from .cache import EventCache
from .config import ConfigStatus, Settings, validate_settings
from .errors import (
    AuthenticationError,
    ConfigurationError,
    EventSearchError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
    ProviderError,
    ServerError,
)
from .models import Event, EventFilters, GeocodeResult, Price, PriceBand, Venue
from .saved import SavedEventStore
from .search import (
    EventSearchClient,
    get_event_by_id,
    get_events_by_ids,
    get_popular_events,
    search_events,
)

__version__ = "1.0.0"

__all__ = [
    'EventSearchClient', 'search_events', 'get_popular_events', 'get_event_by_id', 'get_events_by_ids',
    'Event', 'EventFilters', 'GeocodeResult', 'Price', 'PriceBand', 'Venue',
    'Settings', 'ConfigStatus', 'validate_settings',
    'EventSearchError', 'ConfigurationError', 'NetworkError', 'AuthenticationError',
    'NotFoundError', 'ServerError', 'MalformedResponseError', 'ProviderError',
    'EventCache', 'SavedEventStore',
]
