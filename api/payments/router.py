"""
Payment API endpoints: /api/v1/payment/*
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from auth import service as auth_service

from . import schemas, service

router = APIRouter(prefix="/api/v1/payment")


@router.get("/razorpay-key")
async def get_razorpay_key(_: dict = Depends(auth_dependencies.get_current_user)) -> dict:
    return {"success": True, "message": "Razorpay API key.", "key": service.razorpay_key()}


@router.post("/subscribe")
async def subscribe(current_user: dict = Depends(auth_dependencies.get_current_user)) -> dict:
    result = await service.subscribe(current_user)
    return {"success": True, "message": "Subscribed successfully.", **result}


@router.post("/verify")
async def verify_subscription(
    payload: schemas.VerifySubscriptionRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    user_row = await service.verify(current_user, payload)
    return {
        "success": True,
        "message": "Payment verified successfully.",
        "user": auth_service.to_user_response(user_row),
    }


@router.post("/unsubscribe")
async def unsubscribe(current_user: dict = Depends(auth_dependencies.get_current_user)) -> dict:
    await service.unsubscribe(current_user)
    return {"success": True, "message": "Subscription cancelled successfully."}


@router.get("")
async def all_payments(
    count: int = Query(10, ge=1, le=100),
    skip: int = Query(0, ge=0),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    result = await service.all_payments(count=count, skip=skip)
    return {"success": True, "message": "All payments.", **result}
