"""
Auth dependencies for protected FastAPI routes.

The browser client sends the JWT in the `token` HTTP-only cookie; API clients
may send `Authorization: Bearer <token>` instead.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import Cookie, Depends, Header, status

from core.errors import AppError

from . import roles, service
from .security import AUTH_COOKIE_NAME

UNAUTHENTICATED = "Unauthenticated, please login again."


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise AppError(
            "Invalid Authorization header format.",
            status.HTTP_401_UNAUTHORIZED,
        )

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise AppError(
            "Authorization must be: Bearer <token>.",
            status.HTTP_401_UNAUTHORIZED,
        )
    return token


async def get_access_token(
    token: str | None = Cookie(default=None, alias=AUTH_COOKIE_NAME),
    authorization: str | None = Header(default=None),
) -> str:
    access_token = (token or "").strip() or _extract_bearer_token(authorization)
    if not access_token:
        raise AppError(UNAUTHENTICATED, status.HTTP_401_UNAUTHORIZED)
    return access_token


async def get_current_user(access_token: str = Depends(get_access_token)) -> dict:
    return await service.get_user_from_access_token(access_token)


def require_roles(*allowed: str) -> Callable[..., Awaitable[dict]]:
    """
    Dependency factory: `Depends(require_roles(roles.ADMIN))`.
    """
    allowed_set = set(allowed)

    async def _check(current_user: dict = Depends(get_current_user)) -> dict:
        if str(current_user.get("role") or "") not in allowed_set:
            raise AppError(
                "You do not have permission to access this route.",
                status.HTTP_403_FORBIDDEN,
            )
        return current_user

    return _check


require_admin = require_roles(roles.ADMIN)


async def require_subscriber(current_user: dict = Depends(get_current_user)) -> dict:
    # Checked against the stored row so a cancellation takes effect before the JWT expires.
    if roles.is_admin(current_user) or roles.has_active_subscription(current_user):
        return current_user
    raise AppError(
        "Please subscribe to access this route.",
        status.HTTP_403_FORBIDDEN,
    )
