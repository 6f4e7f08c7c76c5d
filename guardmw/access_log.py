"""Structured access logging middleware."""

from __future__ import annotations

import logging
import time

from guardmw.http import Handler, Headers, Request, ResponseWriter
from guardmw.request_id import get_request_id

_log = logging.getLogger(__name__)


class StatusRecorder:
    """Wraps a writer and records the status code and bytes written."""

    def __init__(self, writer: ResponseWriter, status: int = 200) -> None:
        self.writer = writer
        self.status = status
        self.size = 0

    @property
    def headers(self) -> Headers:
        return self.writer.headers

    def write_header(self, status: int) -> None:
        self.status = status
        self.writer.write_header(status)

    def write(self, data: bytes | str) -> int:
        written = self.writer.write(data)
        self.size += written
        return written


def access_log(next_handler: Handler) -> Handler:
    """Log the start and completion of every request."""

    def handler(writer: ResponseWriter, request: Request) -> None:
        start = time.perf_counter()
        recorder = StatusRecorder(writer)
        common = {
            "request_id": get_request_id(request.context),
            "method": request.method,
            "path": request.path,
        }
        _log.info(
            "http request started",
            extra={
                **common,
                "remote_addr": request.remote_addr,
                "user_agent": request.header("User-Agent"),
            },
        )
        next_handler(recorder, request)
        duration = time.perf_counter() - start
        _log.info(
            "http request completed",
            extra={
                **common,
                "status": recorder.status,
                "size": recorder.size,
                "duration": duration,
                "duration_ms": f"{duration * 1000:.2f}",
            },
        )

    return handler