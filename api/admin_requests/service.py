"""
Admin-request workflow: a USER asks for the ADMIN role, an ADMIN approves or rejects.
"""

from __future__ import annotations

import logging

from fastapi import status

from auth import repository as user_repository
from auth import roles
from core.errors import AppError

from . import repository, schemas

PENDING_EXISTS = "You already have a pending admin request."

logger = logging.getLogger(__name__)


async def create(current_user: dict, payload: schemas.CreateAdminRequest) -> dict:
    if roles.is_admin(current_user):
        raise AppError("You are already an admin.", status.HTTP_400_BAD_REQUEST)

    user_id = int(current_user["id"])
    if await repository.get_pending_for_user(user_id) is not None:
        raise AppError(PENDING_EXISTS, status.HTTP_409_CONFLICT)

    row = await repository.create_request(user_id=user_id, reason=payload.reason)
    if row is None:
        raise AppError(PENDING_EXISTS, status.HTTP_409_CONFLICT)
    logger.info("admin_request_created request_id=%s user_id=%s", row["id"], user_id)
    return row


async def list_mine(current_user: dict) -> list[dict]:
    return await repository.list_for_user(int(current_user["id"]))


async def list_all(*, status_filter: str | None, limit: int, offset: int) -> list[dict]:
    return await repository.list_requests(status=status_filter, limit=limit, offset=offset)


async def _review(request_id: int, *, new_status: str, reviewer: dict) -> dict:
    existing = await repository.get_request(request_id)
    if existing is None:
        raise AppError("Admin request not found.", status.HTTP_404_NOT_FOUND)

    row = await repository.review_request(request_id, status=new_status, reviewed_by=int(reviewer["id"]))
    if row is None:
        raise AppError(
            f"Admin request is already {str(existing['status']).lower()}.",
            status.HTTP_409_CONFLICT,
        )

    logger.info(
        "admin_request_reviewed request_id=%s status=%s reviewer_id=%s",
        request_id,
        new_status,
        reviewer["id"],
    )
    return row


async def approve(request_id: int, reviewer: dict) -> dict:
    row = await _review(request_id, new_status=schemas.APPROVED, reviewer=reviewer)
    await user_repository.set_role(int(row["user_id"]), role=roles.ADMIN)
    return row


async def reject(request_id: int, reviewer: dict) -> dict:
    return await _review(request_id, new_status=schemas.REJECTED, reviewer=reviewer)
