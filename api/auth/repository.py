"""
User persistence helpers.
"""

from __future__ import annotations

from datetime import datetime, timezone

from core import db

USER_COLUMNS = """
    id, full_name, email, password_hash, avatar_public_id, avatar_url, role,
    subscription_id, subscription_status, forgot_password_token,
    forgot_password_expiry, created_at, updated_at
"""


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(
    *,
    full_name: str,
    email: str,
    password_hash: str,
    avatar_public_id: str | None = None,
    avatar_url: str | None = None,
    role: str = "USER",
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (full_name, email, password_hash, avatar_public_id, avatar_url, role)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {USER_COLUMNS}
        """,
        full_name.strip(),
        normalize_email(email),
        password_hash,
        avatar_public_id,
        avatar_url,
        role,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_user_by_id(user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def update_profile(
    user_id: int,
    *,
    full_name: str | None = None,
    avatar_public_id: str | None = None,
    avatar_url: str | None = None,
) -> dict | None:
    # NULL arguments keep the current value.
    return await db.fetch_one(
        f"""
        UPDATE users
        SET full_name = COALESCE($2, full_name),
            avatar_public_id = COALESCE($3, avatar_public_id),
            avatar_url = COALESCE($4, avatar_url),
            updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
        full_name.strip() if full_name else None,
        avatar_public_id,
        avatar_url,
    )


async def update_password(user_id: int, *, password_hash: str) -> None:
    # Changing the password always invalidates an outstanding reset link.
    await db.execute(
        """
        UPDATE users
        SET password_hash = $2,
            forgot_password_token = NULL,
            forgot_password_expiry = NULL,
            updated_at = now()
        WHERE id = $1
        """,
        user_id,
        password_hash,
    )


async def set_reset_token(user_id: int, *, token_hash: str, expires_at: datetime) -> None:
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    await db.execute(
        """
        UPDATE users
        SET forgot_password_token = $2,
            forgot_password_expiry = $3
        WHERE id = $1
        """,
        user_id,
        token_hash,
        expires_at,
    )


async def clear_reset_token(user_id: int) -> None:
    await db.execute(
        """
        UPDATE users
        SET forgot_password_token = NULL,
            forgot_password_expiry = NULL
        WHERE id = $1
        """,
        user_id,
    )


async def get_user_by_reset_token(token_hash: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE forgot_password_token = $1
          AND forgot_password_expiry > now()
        """,
        token_hash,
    )


async def set_subscription(user_id: int, *, subscription_id: str | None, status: str | None) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE users
        SET subscription_id = $2,
            subscription_status = $3,
            updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
        subscription_id,
        status,
    )


async def set_role(user_id: int, *, role: str) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE users
        SET role = $2,
            updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
        role,
    )


async def count_users() -> int:
    return int(await db.fetch_val("SELECT count(*) FROM users"))


async def count_subscribed_users() -> int:
    return int(
        await db.fetch_val(
            """
            SELECT count(*)
            FROM users
            WHERE subscription_status = 'active'
            """
        )
    )
