"""Sanity checks for event ids before they are sent to the provider."""
import re

LEGACY_ID_LENGTH = 15

ALPHANUMERIC = re.compile(r'^[a-zA-Z0-9]+$')
NUMERIC = re.compile(r'^\d+$')


def is_legacy_id(event_id: str) -> bool:
    """Long alphanumeric ids come from the previous events API."""
    return len(event_id) >= LEGACY_ID_LENGTH and bool(ALPHANUMERIC.match(event_id))


def is_valid_provider_id(event_id: str) -> bool:
    # PredictHQ ids are short alphanumerics or plain numbers
    return len(event_id) < LEGACY_ID_LENGTH or bool(NUMERIC.match(event_id))


def describe_invalid_id(event_id: str) -> str:
    """User-facing explanation for an id the provider will not know."""
    if is_legacy_id(event_id):
        return (
            "This event ID appears to be from a previous API. "
            "Please clear your saved events and search for new events. "
            f'Event ID: "{event_id}"'
        )
    return f'Invalid event ID format. Event ID: "{event_id}"'
