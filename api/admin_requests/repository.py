"""
Admin-request persistence (raw SQL).
"""

from __future__ import annotations

import asyncpg

from core import db

REQUEST_COLUMNS = "id, user_id, reason, status, reviewed_by, reviewed_at, created_at"


async def create_request(*, user_id: int, reason: str) -> dict | None:
    """
    Returns None when the user already has a PENDING request.
    """
    try:
        row = await db.fetch_one(
            f"""
            INSERT INTO admin_requests (user_id, reason)
            VALUES ($1, $2)
            RETURNING {REQUEST_COLUMNS}
            """,
            user_id,
            reason.strip(),
        )
    except asyncpg.UniqueViolationError:
        return None
    if row is None:
        raise RuntimeError("Failed to create admin request.")
    return row


async def get_request(request_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {REQUEST_COLUMNS}
        FROM admin_requests
        WHERE id = $1
        """,
        request_id,
    )


async def get_pending_for_user(user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {REQUEST_COLUMNS}
        FROM admin_requests
        WHERE user_id = $1
          AND status = 'PENDING'
        LIMIT 1
        """,
        user_id,
    )


async def list_for_user(user_id: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {REQUEST_COLUMNS}
        FROM admin_requests
        WHERE user_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        user_id,
    )


async def list_requests(*, status: str | None = None, limit: int = 50, offset: int = 0) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT r.id, r.user_id, r.reason, r.status, r.reviewed_by, r.reviewed_at, r.created_at,
               u.full_name AS user_full_name, u.email AS user_email
        FROM admin_requests r
        JOIN users u ON u.id = r.user_id
        WHERE ($1::text IS NULL OR r.status = $1)
        ORDER BY r.created_at DESC, r.id DESC
        LIMIT $2 OFFSET $3
        """,
        status,
        limit,
        offset,
    )


async def review_request(request_id: int, *, status: str, reviewed_by: int) -> dict | None:
    """
    Move a PENDING request to `status`. Returns None if it was not pending.
    """
    return await db.fetch_one(
        f"""
        UPDATE admin_requests
        SET status = $2,
            reviewed_by = $3,
            reviewed_at = now()
        WHERE id = $1
          AND status = 'PENDING'
        RETURNING {REQUEST_COLUMNS}
        """,
        request_id,
        status,
        reviewed_by,
    )
