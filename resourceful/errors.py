"""Exception taxonomy shared by routing, mapping and dispatch."""

from typing import Any


class ResourcefulError(Exception):
    """Base for all resourceful errors."""


class ConfigurationError(ResourcefulError):
    """Raised when a route, filter or resource registration is invalid."""


class GenerationError(ResourcefulError, ValueError):
    """Raised when a path cannot be generated from the supplied arguments."""


class NotFound(ResourcefulError):  # noqa: N818
    """No action matched the request, or a handler signalled a missing item."""

    status = 404

    def __init__(self, detail: str = "Not Found") -> None:
        """Initialize NotFound."""
        super().__init__(detail)
        self.detail = detail


class Redirect(ResourcefulError):  # noqa: N818
    """Control signal: send the client elsewhere.

    Never looked up in the exception-handler table. The dispatcher records
    ``status`` and ``location`` on the response and skips the after filters.
    """

    def __init__(self, location: Any, status: int = 302) -> None:
        """Initialize Redirect."""
        super().__init__(f"{status} -> {location}")
        self.location = str(location)
        self.status = int(status)
