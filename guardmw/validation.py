"""Request validation middleware: body size, content type and method."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import BinaryIO

from guardmw.http import Handler, Request, ResponseWriter

MAX_REQUEST_SIZE = 10 * 1024 * 1024

_TOO_LARGE = "http: request body too large"
_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def bad_request(writer: ResponseWriter, message: str) -> None:
    """Answer 400 with a JSON error body."""
    writer.headers.set("Content-Type", "application/json")
    writer.write_header(400)
    writer.write(json.dumps({"error": message, "code": "BAD_REQUEST"}, separators=(",", ":")))


class _LimitedBody:
    """Body reader that fails once more than ``limit`` bytes are read."""

    def __init__(self, inner: BinaryIO, limit: int) -> None:
        self._inner = inner
        self._remaining = max(0, limit)
        self._exceeded = False

    def read(self, size: int = -1) -> bytes:
        if self._exceeded:
            raise ValueError(_TOO_LARGE)
        want = self._remaining + 1 if size < 0 or size > self._remaining else size
        data = self._inner.read(want)
        if len(data) > self._remaining:
            self._exceeded = True
            self._remaining = 0
            raise ValueError(_TOO_LARGE)
        self._remaining -= len(data)
        return data

    def close(self) -> None:
        self._inner.close()


def request_size_limit(max_bytes: int) -> Callable[[Handler], Handler]:
    """Make body reads fail with ValueError past ``max_bytes``."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(writer: ResponseWriter, request: Request) -> None:
            limited = replace(request, body=_LimitedBody(request.body, max_bytes))
            next_handler(writer, limited)

        return handler

    return middleware


def content_type_validation(next_handler: Handler) -> Handler:
    """Require a JSON Content-Type on POST, PUT and PATCH requests with a body."""

    def handler(writer: ResponseWriter, request: Request) -> None:
        if request.method in _BODY_METHODS and request.content_length > 0:
            content_type = request.header("Content-Type")
            if not content_type:
                bad_request(writer, "Content-Type header is required")
                return
            if content_type != "application/json":
                bad_request(
                    writer,
                    f"Invalid Content-Type: {content_type} (expected application/json)",
                )
                return
        next_handler(writer, request)

    return handler


def method_validation(allowed_methods: Iterable[str]) -> Callable[[Handler], Handler]:
    """Reject methods outside ``allowed_methods`` with 400 and an Allow header."""
    methods = list(allowed_methods)
    allowed = frozenset(methods)
    allow_header = ", ".join(methods)

    def middleware(next_handler: Handler) -> Handler:
        def handler(writer: ResponseWriter, request: Request) -> None:
            if request.method not in allowed:
                writer.headers.set("Allow", allow_header)
                bad_request(writer, f"Method {request.method} not allowed")
                return
            next_handler(writer, request)

        return handler

    return middleware