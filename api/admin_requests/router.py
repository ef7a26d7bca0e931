"""
Admin-request API endpoints: /api/v1/user/admin-requests/*
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/api/v1/user/admin-requests")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: schemas.CreateAdminRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    row = await service.create(current_user, payload)
    return {"success": True, "message": "Admin request submitted.", "request": row}


@router.get("/mine")
async def my_requests(current_user: dict = Depends(auth_dependencies.get_current_user)) -> dict:
    rows = await service.list_mine(current_user)
    return {"success": True, "message": "Your admin requests.", "requests": rows, "count": len(rows)}


@router.get("")
async def list_requests(
    status_filter: schemas.RequestStatus | None = Query(default=None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    rows = await service.list_all(status_filter=status_filter, limit=limit, offset=offset)
    return {
        "success": True,
        "message": "Admin requests.",
        "requests": rows,
        "limit": limit,
        "offset": offset,
        "count": len(rows),
    }


@router.post("/{request_id}/approve")
async def approve_request(
    request_id: int,
    reviewer: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await service.approve(request_id, reviewer)
    return {"success": True, "message": "Admin request approved.", "request": row}


@router.post("/{request_id}/reject")
async def reject_request(
    request_id: int,
    reviewer: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await service.reject(request_id, reviewer)
    return {"success": True, "message": "Admin request rejected.", "request": row}
