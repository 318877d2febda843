"""Transport-neutral request and response objects."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qsl, urlsplit

from resourceful import StatusCode
from resourceful.errors import NotFound, Redirect

DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass
class Response:
    """Mutable response built up while a request is dispatched."""

    status_code: Union[StatusCode, int] = StatusCode.OK
    content_type: str = "text/html"
    body: Union[str, bytes] = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def location(self) -> Optional[str]:
        """Return the Location header, if any."""
        return self.headers.get("Location")

    @location.setter
    def location(self, value: str) -> None:
        self.headers["Location"] = value

    def write(self, value: Any) -> None:
        """Append ``value`` to the body; ``None`` writes nothing."""
        if value is None:
            return
        if isinstance(value, bytes):
            body = self.body.encode() if isinstance(self.body, str) else self.body
            self.body = body + value
        elif isinstance(self.body, bytes):
            self.body = self.body + str(value).encode()
        else:
            self.body = self.body + str(value)

    def finish(self) -> Dict[str, Any]:
        """Return the response as a plain dict for the hosting transport."""
        headers = dict(self.headers)
        headers["Content-Type"] = self.content_type
        return {
            "headers": headers,
            "statusCode": int(self.status_code),
            "body": self.body,
        }


@dataclass
class Request:
    """Incoming request, with the response under construction attached."""

    method: str
    url: str
    scheme: str = "http"
    host: str = "localhost"
    port: Optional[int] = 80
    path: str = "/"
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Union[str, bytes]] = None
    response: Response = field(default_factory=Response)

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Union[str, bytes]] = None,
    ) -> "Request":
        """Create a request from a full URL or a bare path.

        Query string values are merged under any explicit ``params``.
        """
        parts = urlsplit(url)
        scheme = parts.scheme or "http"
        host = parts.hostname or "localhost"
        try:
            port: Optional[int] = parts.port or DEFAULT_PORTS.get(scheme, 80)
        except ValueError:
            # not a number, URL templates will reject it
            port = None
        netloc = parts.netloc.rpartition("@")[2] or host
        path = parts.path or "/"

        request_params: Dict[str, Any] = dict(parse_qsl(parts.query))
        request_params.update(params or {})

        # header names are case insensitive
        request_headers = dict(
            (key.lower(), value) for key, value in (headers or {}).items()
        )

        return cls(
            method=method.upper(),
            url=f"{scheme}://{netloc}{path}",
            scheme=scheme,
            host=host,
            port=port,
            path=path,
            params=request_params,
            headers=request_headers,
            body=body,
        )

    def not_found(self, detail: str = "Not Found") -> None:
        """Signal that the requested item does not exist."""
        raise NotFound(detail)

    def redirect(self, location: Any, status: int = 302) -> None:
        """Signal a redirect to ``location``."""
        raise Redirect(location, status)
