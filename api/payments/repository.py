"""
Payment persistence (raw SQL).
"""

from __future__ import annotations

import asyncpg

from core import db

PAYMENT_COLUMNS = """
    id, user_id, razorpay_payment_id, razorpay_subscription_id,
    razorpay_signature, created_at
"""


async def create_payment(
    *,
    user_id: int,
    razorpay_payment_id: str,
    razorpay_subscription_id: str,
    razorpay_signature: str,
) -> dict | None:
    """
    Returns None when the payment id is already recorded.
    """
    try:
        row = await db.fetch_one(
            f"""
            INSERT INTO payments (user_id, razorpay_payment_id, razorpay_subscription_id, razorpay_signature)
            VALUES ($1, $2, $3, $4)
            RETURNING {PAYMENT_COLUMNS}
            """,
            user_id,
            razorpay_payment_id,
            razorpay_subscription_id,
            razorpay_signature,
        )
    except asyncpg.UniqueViolationError:
        return None
    if row is None:
        raise RuntimeError("Failed to record payment.")
    return row


async def get_by_payment_id(razorpay_payment_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {PAYMENT_COLUMNS}
        FROM payments
        WHERE razorpay_payment_id = $1
        """,
        razorpay_payment_id,
    )


async def get_latest_by_subscription(subscription_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {PAYMENT_COLUMNS}
        FROM payments
        WHERE razorpay_subscription_id = $1
        ORDER BY created_at DESC, id DESC
        LIMIT 1
        """,
        subscription_id,
    )


async def delete_payment(payment_id: int) -> None:
    await db.execute(
        """
        DELETE FROM payments
        WHERE id = $1
        """,
        payment_id,
    )


async def monthly_payment_counts(year: int) -> dict[int, int]:
    """
    Number of payments per calendar month (1..12) in `year`; months without payments are absent.
    """
    rows = await db.fetch_all(
        """
        SELECT EXTRACT(MONTH FROM created_at)::int AS month, count(*)::int AS total
        FROM payments
        WHERE EXTRACT(YEAR FROM created_at)::int = $1
        GROUP BY 1
        """,
        year,
    )
    return {int(row["month"]): int(row["total"]) for row in rows}
