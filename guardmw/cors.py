"""Cross-origin resource sharing middleware."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from guardmw.http import Handler, Request, ResponseWriter


@dataclass(frozen=True)
class CORSOptions:
    allowed_origins: tuple[str, ...] = ("*",)
    allowed_methods: tuple[str, ...] = ("GET", "POST", "HEAD")
    allowed_headers: tuple[str, ...] = ("Origin", "Accept", "Content-Type", "X-Requested-With")
    exposed_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 0


def cors_handler(options: CORSOptions) -> Callable[[Handler], Handler]:
    """Answer preflight requests and add CORS headers to actual requests."""
    origins = {o.lower() for o in options.allowed_origins}
    methods = {m.upper() for m in options.allowed_methods}
    headers_ok = {h.lower() for h in options.allowed_headers} | {"origin"}

    def allowed_origin(request: Request) -> str:
        origin = request.header("Origin")
        if not origin or not ("*" in origins or origin.lower() in origins):
            return ""
        return "*" if "*" in origins and not options.allow_credentials else origin

    def preflight(writer: ResponseWriter, request: Request) -> None:
        out = writer.headers
        for vary in ("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers"):
            out.add("Vary", vary)
        origin = allowed_origin(request)
        method = request.header("Access-Control-Request-Method").upper()
        raw = request.header("Access-Control-Request-Headers")
        requested = [h.strip() for h in raw.split(",") if h.strip()]
        if (
            not origin
            or (method != "OPTIONS" and method not in methods)
            or ("*" not in headers_ok and any(h.lower() not in headers_ok for h in requested))
        ):
            return
        out.set("Access-Control-Allow-Origin", origin)
        out.set("Access-Control-Allow-Methods", method)
        if requested:
            out.set("Access-Control-Allow-Headers", ", ".join(requested))
        if options.allow_credentials:
            out.set("Access-Control-Allow-Credentials", "true")
        if options.max_age > 0:
            out.set("Access-Control-Max-Age", str(options.max_age))

    def actual(writer: ResponseWriter, request: Request) -> None:
        out = writer.headers
        out.add("Vary", "Origin")
        origin = allowed_origin(request)
        if not origin or request.method.upper() not in methods:
            return
        out.set("Access-Control-Allow-Origin", origin)
        if options.exposed_headers:
            out.set("Access-Control-Expose-Headers", ", ".join(options.exposed_headers))
        if options.allow_credentials:
            out.set("Access-Control-Allow-Credentials", "true")

    def middleware(next_handler: Handler) -> Handler:
        def handler(writer: ResponseWriter, request: Request) -> None:
            if request.method == "OPTIONS" and request.header("Access-Control-Request-Method"):
                preflight(writer, request)
                writer.write_header(200)
                return
            actual(writer, request)
            next_handler(writer, request)

        return handler

    return middleware


def cors() -> Callable[[Handler], Handler]:
    """CORS middleware with the service's default policy."""
    return cors_handler(
        CORSOptions(
            allowed_origins=("http://localhost:3000", "http://localhost:8080"),
            allowed_methods=("GET", "POST", "PUT", "DELETE", "OPTIONS"),
            allowed_headers=("Accept", "Authorization", "Content-Type", "X-Request-ID", "X-API-Key"),
            exposed_headers=("X-Request-ID",),
            allow_credentials=True,
            max_age=300,
        )
    )