"""Middleware adding security-related response headers."""

from __future__ import annotations

from guardmw.http import Handler, Request, ResponseWriter

_STATIC_HEADERS = (
    ("X-Content-Type-Options", "nosniff"),
    ("X-XSS-Protection", "1; mode=block"),
    ("X-Frame-Options", "DENY"),
    ("Content-Security-Policy", "default-src 'self'"),
    ("Referrer-Policy", "strict-origin-when-cross-origin"),
    ("Permissions-Policy", "geolocation=(), microphone=(), camera=()"),
)

HSTS_VALUE = "max-age=31536000; includeSubDomains"


def security_headers(next_handler: Handler) -> Handler:
    """Set hardening headers, plus HSTS when the request came over TLS."""

    def handler(writer: ResponseWriter, request: Request) -> None:
        for name, value in _STATIC_HEADERS:
            writer.headers.set(name, value)
        if request.tls:
            writer.headers.set("Strict-Transport-Security", HSTS_VALUE)
        next_handler(writer, request)

    return handler