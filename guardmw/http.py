"""Request and response primitives shared by the middleware.

A handler is a callable taking ``(writer, request)``; a middleware takes a
handler and returns a new one.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, BinaryIO, Union
from urllib.parse import urlsplit

HeaderSource = Union[Mapping[str, str], Iterable[tuple[str, str]], None]


class Headers:
    """Case-insensitive HTTP header collection."""

    def __init__(self, initial: HeaderSource = None) -> None:
        self._items: dict[str, list[str]] = {}
        pairs = initial.items() if isinstance(initial, Mapping) else (initial or ())
        for name, value in pairs:
            self.add(name, value)

    def get(self, name: str, default: str = "") -> str:
        values = self._items.get(name.lower())
        return values[0] if values else default

    def set(self, name: str, value: str) -> None:
        self._items[name.lower()] = [value]

    def add(self, name: str, value: str) -> None:
        self._items.setdefault(name.lower(), []).append(value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items


@dataclass
class Request:
    """An incoming HTTP request as seen by handlers."""

    method: str = "GET"
    path: str = "/"
    raw_query: str = ""
    host: str = "example.com"
    headers: Headers = field(default_factory=Headers)
    body: BinaryIO = field(default_factory=io.BytesIO)
    content_length: int = 0
    remote_addr: str = "192.0.2.1:1234"
    tls: bool = False
    context: dict[str, Any] = field(default_factory=dict)

    def with_context(self, **kwargs: Any) -> "Request":
        """Return a copy whose context also holds ``kwargs``."""
        return replace(self, context={**self.context, **kwargs})

    def header(self, name: str) -> str:
        return self.headers.get(name, "")


class ResponseWriter:
    """Collects the status, headers and body a handler produces."""

    def __init__(self) -> None:
        self.headers = Headers()
        self.status = 200
        self.body = bytearray()
        self.wrote_header = False

    def write_header(self, status: int) -> None:
        """Send the status; later calls are ignored."""
        if not self.wrote_header:
            self.status = status
            self.wrote_header = True

    def write(self, data: bytes | str) -> int:
        """Append to the body, sending a 200 status first if none was sent."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.write_header(200)
        self.body.extend(data)
        return len(data)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


Handler = Callable[[ResponseWriter, Request], None]
Middleware = Callable[[Handler], Handler]


def new_request(
    method: str,
    target: str,
    body: bytes | str | None = None,
    headers: HeaderSource = None,
) -> Request:
    """Build a request for ``target``, a path or an absolute URL."""
    parts = urlsplit(target)
    payload = body.encode("utf-8") if isinstance(body, str) else (body or b"")
    return Request(
        method=method,
        path=parts.path or "/",
        raw_query=parts.query,
        host=parts.netloc or "example.com",
        headers=Headers(headers),
        body=io.BytesIO(payload),
        content_length=len(payload),
        tls=parts.scheme == "https",
    )


def chain(handler: Handler, *args: Middleware) -> Handler:
    """Wrap ``handler`` so that the first middleware given runs outermost."""
    for middleware in reversed(args):
        handler = middleware(handler)
    return handler