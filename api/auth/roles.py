"""
User roles and subscription states.
"""

from __future__ import annotations

USER = "USER"
ADMIN = "ADMIN"

ALL_ROLES = (USER, ADMIN)

SUBSCRIPTION_ACTIVE = "active"


def is_admin(user_row: dict) -> bool:
    return str(user_row.get("role") or "") == ADMIN


def has_active_subscription(user_row: dict) -> bool:
    return str(user_row.get("subscription_status") or "") == SUBSCRIPTION_ACTIVE
