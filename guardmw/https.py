"""Middleware that redirects plain HTTP requests to HTTPS."""

from __future__ import annotations

import html
from collections.abc import Callable
from dataclasses import dataclass

from guardmw.http import Handler, Request, ResponseWriter


@dataclass(frozen=True)
class HTTPSConfig:
    enabled: bool = False


def enforce_https(config: HTTPSConfig) -> Callable[[Handler], Handler]:
    """Redirect non-TLS requests to the same URL over HTTPS when enabled."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(writer: ResponseWriter, request: Request) -> None:
            secure = request.tls or request.header("X-Forwarded-Proto") == "https"
            if not config.enabled or secure:
                next_handler(writer, request)
                return
            target = "https://" + request.host + request.path
            if request.raw_query:
                target += "?" + request.raw_query
            writer.headers.set("Location", target)
            if request.method == "GET":
                writer.headers.set("Content-Type", "text/html; charset=utf-8")
            writer.write_header(301)
            if request.method == "GET":
                writer.write(f'<a href="{html.escape(target)}">Moved Permanently</a>.\n\n')

        return handler

    return middleware