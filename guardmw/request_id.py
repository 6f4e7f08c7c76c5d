"""Request ID middleware."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from guardmw.http import Handler, Request, ResponseWriter

REQUEST_ID_KEY = "request_id"


def request_id(next_handler: Handler) -> Handler:
    """Reuse the incoming X-Request-ID or generate one, and expose it."""

    def handler(writer: ResponseWriter, request: Request) -> None:
        rid = request.header("X-Request-ID") or str(uuid.uuid4())
        writer.headers.set("X-Request-ID", rid)
        next_handler(writer, request.with_context(**{REQUEST_ID_KEY: rid}))

    return handler


def get_request_id(context: Mapping[str, Any]) -> str:
    """Return the request ID stored in ``context``, or an empty string."""
    value = context.get(REQUEST_ID_KEY)
    return value if isinstance(value, str) else ""