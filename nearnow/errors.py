"""Error types raised by the event search client.

Every error carries a ``message`` that can be shown to the user as-is.
"""
from typing import Optional


class EventSearchError(Exception):
    """Base class for all search client failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(EventSearchError):
    """Provider base URL or token is missing."""


class NetworkError(EventSearchError):
    """The provider could not be reached (connection failure, timeout)."""


class MalformedResponseError(EventSearchError):
    """The provider answered with a payload we cannot interpret."""


class ProviderError(EventSearchError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """401/403 from the provider."""


class NotFoundError(ProviderError):
    """404 from the provider, or no matching event in the results."""


class ServerError(ProviderError):
    """5xx from the provider."""
