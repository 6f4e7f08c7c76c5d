"""A small path router with URL parameters, groups and sub-routes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from guardmw.http import Handler, Middleware, Request, ResponseWriter, chain

URL_PARAMS_KEY = "url_params"


def _join(prefix: str, pattern: str) -> str:
    joined = prefix.rstrip("/") + "/" + pattern.lstrip("/")
    return joined.rstrip("/") or "/"


def _segments(path: str) -> list[str]:
    path = path.rstrip("/") or "/"
    return [] if path == "/" else path.lstrip("/").split("/")


@dataclass
class _Route:
    method: str | None
    segments: list[str]
    handler: Handler

    def match(self, parts: list[str]) -> dict[str, str] | None:
        if len(parts) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for expected, actual in zip(self.segments, parts):
            if expected.startswith("{") and expected.endswith("}"):
                if not actual:
                    return None
                params[expected[1:-1]] = actual
            elif expected != actual:
                return None
        return params


def _not_found(writer: ResponseWriter, request: Request) -> None:
    writer.headers.set("Content-Type", "text/plain; charset=utf-8")
    writer.headers.set("X-Content-Type-Options", "nosniff")
    writer.write_header(404)
    writer.write("404 page not found\n")


class Router:
    """Dispatches requests to handlers by method and path pattern."""

    def __init__(
        self,
        _root: "Router | None" = None,
        _prefix: str = "",
        _stack: tuple[Middleware, ...] = (),
    ) -> None:
        self._root = _root or self
        self._prefix = _prefix
        self._stack = tuple(_stack)
        self._middlewares: list[Middleware] = []
        self._has_routes = False
        if _root is None:
            self._routes: list[_Route] = []

    def _chain(self) -> tuple[Middleware, ...]:
        if self._root is self:
            return self._stack
        return self._stack + tuple(self._middlewares)

    def use(self, *args: Middleware) -> None:
        """Append middlewares; they must be added before any route."""
        if self._has_routes:
            raise RuntimeError("all middlewares must be defined before routes")
        self._middlewares.extend(args)

    def with_(self, *args: Middleware) -> "Router":
        """Return an inline router whose routes also run ``args``."""
        return Router(self._root, self._prefix, self._chain() + tuple(args))

    def method(self, method: str | None, pattern: str, handler: Handler) -> None:
        full = _join(self._prefix, pattern)
        self._root._routes.append(
            _Route(method.upper() if method else None, _segments(full), chain(handler, *self._chain()))
        )
        self._has_routes = True

    def get(self, pattern: str, handler: Handler) -> None:
        self.method("GET", pattern, handler)

    def post(self, pattern: str, handler: Handler) -> None:
        self.method("POST", pattern, handler)

    def put(self, pattern: str, handler: Handler) -> None:
        self.method("PUT", pattern, handler)

    def delete(self, pattern: str, handler: Handler) -> None:
        self.method("DELETE", pattern, handler)

    def handle(self, pattern: str, handler: Handler) -> None:
        """Route every method on ``pattern`` to ``handler``."""
        self.method(None, pattern, handler)

    def route(self, prefix: str, build: Callable[["Router"], None]) -> "Router":
        sub = Router(self._root, _join(self._prefix, prefix), self._chain())
        build(sub)
        self._has_routes = True
        return sub

    def group(self, build: Callable[["Router"], None]) -> "Router":
        sub = Router(self._root, self._prefix, self._chain())
        build(sub)
        self._has_routes = True
        return sub

    def _dispatch(self, writer: ResponseWriter, request: Request) -> None:
        parts = _segments(request.path)
        allowed: list[str] = []
        for route in self._root._routes:
            params = route.match(parts)
            if params is None:
                continue
            if route.method is None or route.method == request.method:
                merged = {**request.context.get(URL_PARAMS_KEY, {}), **params}
                route.handler(writer, request.with_context(**{URL_PARAMS_KEY: merged}))
                return
            if route.method not in allowed:
                allowed.append(route.method)
        if allowed:
            writer.headers.set("Allow", ", ".join(allowed))
            writer.write_header(405)
            return
        _not_found(writer, request)

    def __call__(self, writer: ResponseWriter, request: Request) -> None:
        root = self._root
        chain(root._dispatch, *root._middlewares)(writer, request)


def url_param(request: Request, name: str) -> str:
    """Return the URL parameter ``name`` matched by the router, or ''."""
    return request.context.get(URL_PARAMS_KEY, {}).get(name, "")