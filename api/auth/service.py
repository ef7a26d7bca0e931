"""
Auth business logic.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import UploadFile, status

from core import env, mailer, storage
from core.errors import AppError

from . import repository, roles, schemas, security

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

AVATAR_FOLDER = "avatars"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    user: schemas.UserResponse
    token: str


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def reset_token_expire_minutes() -> int:
    return env.env_int("RESET_TOKEN_EXPIRE_MIN", 15)


def to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        full_name=str(user_row["full_name"]),
        email=str(user_row["email"]),
        role=str(user_row["role"]),
        avatar=schemas.Avatar(
            public_id=user_row.get("avatar_public_id"),
            secure_url=user_row.get("avatar_url"),
        ),
        subscription=schemas.Subscription(
            id=user_row.get("subscription_id"),
            status=user_row.get("subscription_status"),
        ),
        created_at=user_row["created_at"],
    )


def issue_token(user_row: dict) -> str:
    return security.build_access_token(
        user_id=int(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row["role"]),
        subscription_status=user_row.get("subscription_status"),
    )


def validate_email(email: str) -> str:
    normalized = repository.normalize_email(email)
    if not EMAIL_RE.match(normalized):
        raise AppError(
            "Please enter a valid email address.",
            status.HTTP_400_BAD_REQUEST,
        )
    return normalized


async def register(
    *,
    full_name: str,
    email: str,
    password: str,
    avatar: UploadFile | None = None,
) -> AuthResult:
    email = validate_email(email)
    existing = await repository.get_user_by_email(email)
    if existing is not None:
        raise AppError(
            "Email already exists.",
            status.HTTP_409_CONFLICT,
        )

    stored: storage.StoredMedia | None = None
    if avatar is not None and avatar.filename:
        stored = await storage.save_upload(
            avatar,
            folder=AVATAR_FOLDER,
            allowed_extensions=storage.IMAGE_EXTENSIONS,
        )

    user_row = await repository.create_user(
        full_name=full_name,
        email=email,
        password_hash=security.hash_password(password),
        avatar_public_id=stored.public_id if stored else None,
        avatar_url=stored.secure_url if stored else None,
        role=roles.USER,
    )
    logger.info("user_registered user_id=%s", user_row["id"])
    return AuthResult(user=to_user_response(user_row), token=issue_token(user_row))


async def login(payload: schemas.LoginRequest) -> AuthResult:
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None or not security.verify_password(
        payload.password, str(user_row.get("password_hash") or "")
    ):
        raise AppError(
            "Email or password do not match.",
            status.HTTP_401_UNAUTHORIZED,
        )

    logger.info("user_logged_in user_id=%s", user_row["id"])
    return AuthResult(user=to_user_response(user_row), token=issue_token(user_row))


def _reset_email_html(reset_url: str) -> str:
    return (
        "<p>You asked to reset your password.</p>"
        f'<p><a href="{reset_url}" target="_blank">Reset your password</a></p>'
        f"<p>If the link does not work, paste this into your browser: {reset_url}</p>"
        f"<p>The link expires in {reset_token_expire_minutes()} minutes. "
        "If you did not ask for this, ignore this e-mail.</p>"
    )


async def forgot_password(payload: schemas.ForgotPasswordRequest) -> str:
    """
    Store a hashed one-time token and e-mail the raw token as a reset link.
    Returns the address the link was sent to.
    """
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None:
        raise AppError(
            "Email not registered.",
            status.HTTP_404_NOT_FOUND,
        )

    user_id = int(user_row["id"])
    raw_token = security.build_reset_token()
    await repository.set_reset_token(
        user_id,
        token_hash=security.hash_reset_token(raw_token),
        expires_at=_utc_now() + timedelta(minutes=reset_token_expire_minutes()),
    )

    reset_url = f"{env.frontend_url()}/reset-password/{raw_token}"
    try:
        await mailer.send_email(
            to=str(user_row["email"]),
            subject="Reset password",
            html=_reset_email_html(reset_url),
        )
    except mailer.MailerError as exc:
        # A link nobody received must not stay valid.
        await repository.clear_reset_token(user_id)
        logger.warning("reset_email_failed user_id=%s error=%s", user_id, exc)
        raise AppError(
            "Could not send the reset e-mail, please try again.",
            status.HTTP_502_BAD_GATEWAY,
        ) from exc

    logger.info("password_reset_requested user_id=%s", user_id)
    return str(user_row["email"])


async def reset_password(reset_token: str, payload: schemas.ResetPasswordRequest) -> None:
    try:
        token_hash = security.hash_reset_token(reset_token)
    except security.AuthSecurityError as exc:
        raise AppError(str(exc), status.HTTP_400_BAD_REQUEST) from exc

    user_row = await repository.get_user_by_reset_token(token_hash)
    if user_row is None:
        raise AppError(
            "Token is invalid or expired, please try again.",
            status.HTTP_400_BAD_REQUEST,
        )

    await repository.update_password(
        int(user_row["id"]),
        password_hash=security.hash_password(payload.password),
    )
    logger.info("password_reset user_id=%s", user_row["id"])


async def change_password(current_user: dict, payload: schemas.ChangePasswordRequest) -> None:
    if not security.verify_password(payload.old_password, str(current_user.get("password_hash") or "")):
        raise AppError(
            "Invalid old password.",
            status.HTTP_400_BAD_REQUEST,
        )

    await repository.update_password(
        int(current_user["id"]),
        password_hash=security.hash_password(payload.new_password),
    )
    logger.info("password_changed user_id=%s", current_user["id"])


async def update_user(
    current_user: dict,
    user_id: int,
    *,
    full_name: str | None = None,
    avatar: UploadFile | None = None,
) -> schemas.UserResponse:
    if int(current_user["id"]) != user_id and not roles.is_admin(current_user):
        raise AppError(
            "You can only update your own profile.",
            status.HTTP_403_FORBIDDEN,
        )

    target = current_user if int(current_user["id"]) == user_id else await repository.get_user_by_id(user_id)
    if target is None:
        raise AppError("User does not exist.", status.HTTP_404_NOT_FOUND)

    stored: storage.StoredMedia | None = None
    if avatar is not None and avatar.filename:
        stored = await storage.save_upload(
            avatar,
            folder=AVATAR_FOLDER,
            allowed_extensions=storage.IMAGE_EXTENSIONS,
        )

    updated = await repository.update_profile(
        user_id,
        full_name=full_name,
        avatar_public_id=stored.public_id if stored else None,
        avatar_url=stored.secure_url if stored else None,
    )
    if updated is None:
        raise AppError("User does not exist.", status.HTTP_404_NOT_FOUND)

    if stored is not None:
        await storage.delete_media(target.get("avatar_public_id"))

    logger.info("user_updated user_id=%s by=%s", user_id, current_user["id"])
    return to_user_response(updated)


async def get_user_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise AppError(
            "Unauthenticated, please login again.",
            status.HTTP_401_UNAUTHORIZED,
        ) from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise AppError(
            "Unauthenticated, please login again.",
            status.HTTP_401_UNAUTHORIZED,
        )

    user_row = await repository.get_user_by_id(int(subject))
    if user_row is None:
        raise AppError(
            "User not found.",
            status.HTTP_401_UNAUTHORIZED,
        )
    return user_row
