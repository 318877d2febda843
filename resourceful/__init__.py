"""resourceful: resource-oriented request routing and dispatch."""

from enum import IntEnum

__version__ = "1.0.0"


class StatusCode(IntEnum):
    """HTTP status codes used by the dispatcher and its callers."""

    OK = 200
    CREATED = 201
    NO_CONTENT = 204
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    TEMPORARY_REDIRECT = 307
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INTERNAL_SERVER_ERROR = 500


from resourceful.application import Application  # noqa: E402
from resourceful.errors import (  # noqa: E402
    ConfigurationError,
    GenerationError,
    NotFound,
    Redirect,
    ResourcefulError,
)
from resourceful.resources import Resource  # noqa: E402
from resourceful.types import Request, Response  # noqa: E402

__all__ = [
    "Application",
    "ConfigurationError",
    "GenerationError",
    "NotFound",
    "Redirect",
    "Request",
    "Resource",
    "ResourcefulError",
    "Response",
    "StatusCode",
]
