"""JWT authentication middleware and token helpers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from guardmw.http import Handler, Request, ResponseWriter

USER_ID_KEY = "user_id"
USER_EMAIL_KEY = "user_email"
ISSUER = "cfguardian"
_ALGORITHMS = ["HS256", "HS384", "HS512"]


class InvalidTokenError(Exception):
    """Raised when a token cannot be accepted."""


@dataclass(frozen=True)
class Claims:
    """Claims carried by access and refresh tokens."""

    user_id: str = ""
    email: str = ""
    type: str = ""
    expires_at: datetime | None = None
    issued_at: datetime | None = None
    issuer: str = ""


@dataclass(frozen=True)
class AuthConfig:
    jwt_secret: str = ""


def _ts(value: Any) -> datetime | None:
    return datetime.fromtimestamp(value, tz=timezone.utc) if value is not None else None


def _parse(token: str, secret: str) -> Claims:
    try:
        data = jwt.decode(token, secret, algorithms=_ALGORITHMS)
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(f"invalid token: {exc}") from exc
    return Claims(
        user_id=str(data.get("user_id", "")),
        email=str(data.get("email", "")),
        type=str(data.get("type", "")),
        expires_at=_ts(data.get("exp")),
        issued_at=_ts(data.get("iat")),
        issuer=str(data.get("iss", "")),
    )


def _unauthorized(writer: ResponseWriter, message: str) -> None:
    writer.headers.set("Content-Type", "application/json")
    writer.write_header(401)
    writer.write('{"error":"%s","code":"UNAUTHORIZED"}' % message)


def auth(config: AuthConfig) -> Callable[[Handler], Handler]:
    """Require a valid Bearer JWT and put the user into the request context."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(writer: ResponseWriter, request: Request) -> None:
            header = request.header("Authorization")
            if not header:
                _unauthorized(writer, "Missing authorization header")
                return
            parts = header.split(" ")
            if len(parts) != 2 or parts[0] != "Bearer":
                _unauthorized(writer, "Invalid authorization header format")
                return
            try:
                claims = _parse(parts[1], config.jwt_secret)
            except InvalidTokenError:
                _unauthorized(writer, "Invalid or expired token")
                return
            next_handler(
                writer,
                request.with_context(**{USER_ID_KEY: claims.user_id, USER_EMAIL_KEY: claims.email}),
            )

        return handler

    return middleware


def get_user_id(context: Mapping[str, Any]) -> str:
    value = context.get(USER_ID_KEY)
    return value if isinstance(value, str) else ""


def get_user_email(context: Mapping[str, Any]) -> str:
    value = context.get(USER_EMAIL_KEY)
    return value if isinstance(value, str) else ""


def _sign(user_id: str, email: str, secret: str, expiration: timedelta, kind: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "email": email,
        "type": kind,
        "iss": ISSUER,
        "exp": now + expiration,
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def generate_token(user_id: str, email: str, secret: str, expiration: timedelta) -> str:
    """Sign an HS256 access token."""
    return _sign(user_id, email, secret, expiration, "access")


def generate_refresh_token(user_id: str, email: str, secret: str, expiration: timedelta) -> str:
    """Sign an HS256 refresh token."""
    return _sign(user_id, email, secret, expiration, "refresh")


def validate_refresh_token(token: str, secret: str) -> Claims:
    """Return the claims of a valid refresh token, else raise InvalidTokenError."""
    try:
        claims = _parse(token, secret)
    except InvalidTokenError as exc:
        raise InvalidTokenError(f"invalid refresh token: {exc}") from exc
    if claims.type != "refresh":
        raise InvalidTokenError("token is not a refresh token")
    return claims