"""Middleware turning unhandled exceptions into a 500 JSON response."""

from __future__ import annotations

import json
import logging
import traceback

from guardmw.http import Handler, Request, ResponseWriter
from guardmw.request_id import get_request_id

_log = logging.getLogger(__name__)


def recovery(next_handler: Handler) -> Handler:
    """Catch exceptions from ``next_handler``, log them and answer 500."""

    def handler(writer: ResponseWriter, request: Request) -> None:
        try:
            next_handler(writer, request)
        except Exception as exc:
            rid = get_request_id(request.context)
            _log.error(
                "panic recovered",
                extra={
                    "request_id": rid,
                    "method": request.method,
                    "path": request.path,
                    "error": repr(exc),
                    "stack": traceback.format_exc(),
                },
            )
            writer.headers.set("Content-Type", "application/json")
            writer.write_header(500)
            writer.write(
                json.dumps(
                    {
                        "error": "Internal server error",
                        "code": "INTERNAL_SERVER_ERROR",
                        "request_id": rid,
                    },
                    separators=(",", ":"),
                )
            )

    return handler