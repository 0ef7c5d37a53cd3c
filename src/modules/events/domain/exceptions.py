"""Event domain exceptions."""

from src.core.domain.exceptions import EntityNotFoundError, ValidationError


class EventNotFoundError(EntityNotFoundError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str | None = None):
        super().__init__("Event", event_id)


class InvalidEventUrlError(ValidationError):
    """Raised when a URL cannot be parsed into a (domain, path) key."""

    error_code = "INVALID_URL"

    def __init__(self, url: str):
        super().__init__(f"Invalid URL: {url}")
