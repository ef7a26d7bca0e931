"""
Miscellaneous endpoints: contact form and admin statistics.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/api/v1")


@router.post("/contact")
async def contact_us(payload: schemas.ContactRequest) -> dict:
    await service.contact_us(payload)
    return {"success": True, "message": "Thank you for contacting us, your message has been sent."}


@router.get("/admin/stats/users")
async def user_stats(_: dict = Depends(auth_dependencies.require_admin)) -> dict:
    stats = await service.user_stats()
    return {"success": True, "message": "All registered users count.", **stats}
