"""
Auth security helpers.
"""

from __future__ import annotations

import hashlib
import secrets
import time
from typing import Any

import bcrypt
import jwt

from core import env

AUTH_COOKIE_NAME = "token"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return env.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return env.env_str("JWT_ALG", "HS256")


def token_expire_days() -> int:
    return env.env_int("JWT_EXPIRY_DAYS", 7)


def token_max_age_s() -> int:
    return token_expire_days() * 24 * 60 * 60


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(
    *,
    user_id: int,
    email: str,
    role: str,
    subscription_status: str | None = None,
) -> str:
    issued_at = now_epoch_s()
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "subscription_status": subscription_status,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + token_max_age_s(),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    return payload


def build_reset_token() -> str:
    return secrets.token_hex(20)


def hash_reset_token(raw_token: str) -> str:
    token = (raw_token or "").strip().encode("utf-8")
    if not token:
        raise AuthSecurityError("Reset token is empty.")
    return hashlib.sha256(token).hexdigest()
