"""Project role authorization middleware."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from guardmw.auth import get_user_id
from guardmw.http import Handler, Request, ResponseWriter
from guardmw.routing import url_param


@dataclass(frozen=True)
class CheckPermissionRequest:
    user_id: str
    project_id: str
    required_role_level: str


@dataclass(frozen=True)
class CheckPermissionResponse:
    allowed: bool
    user_role_level: str = ""


class PermissionChecker(Protocol):
    """Decides whether a user holds a role level in a project."""

    def execute(
        self, context: Mapping[str, Any], request: CheckPermissionRequest
    ) -> CheckPermissionResponse | None: ...


@dataclass
class AuthorizationConfig:
    check_permission: PermissionChecker


def require_role(config: AuthorizationConfig, required_role: str) -> Callable[[Handler], Handler]:
    """Require ``required_role`` in the project named by the projectId URL param."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(writer: ResponseWriter, request: Request) -> None:
            user_id = get_user_id(request.context)
            if not user_id:
                writer.headers.set("Content-Type", "application/json")
                writer.write_header(401)
                writer.write('{"error":"User not authenticated","code":"UNAUTHORIZED"}')
                return
            project_id = url_param(request, "projectId")
            if not project_id:
                next_handler(writer, request)
                return
            try:
                response = config.check_permission.execute(
                    request.context,
                    CheckPermissionRequest(user_id, project_id, required_role),
                )
            except Exception:
                response = None
            if response is None or not response.allowed:
                writer.headers.set("Content-Type", "application/json")
                writer.write_header(403)
                writer.write('{"error":"Insufficient permissions","code":"FORBIDDEN"}')
                return
            next_handler(writer, request)

        return handler

    return middleware


def require_admin(config: AuthorizationConfig) -> Callable[[Handler], Handler]:
    return require_role(config, "admin")


def require_editor(config: AuthorizationConfig) -> Callable[[Handler], Handler]:
    return require_role(config, "editor")


def require_viewer(config: AuthorizationConfig) -> Callable[[Handler], Handler]:
    return require_role(config, "viewer")