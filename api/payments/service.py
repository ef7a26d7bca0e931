"""
Subscription billing on top of Razorpay.

Flow:
1. `subscribe` creates a Razorpay subscription and remembers its id on the user.
2. Razorpay Checkout collects the payment in the browser and hands back
   payment id + subscription id + signature.
3. `verify` checks the signature, records the payment and activates the user.
   A payment id is recorded once; replays are rejected.
4. `unsubscribe` cancels at Razorpay and refunds when still inside the refund window.
   A subscription already cancelled locally is not cancelled again, so a
   failed refund can be retried.
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable

from fastapi import status

from auth import repository as user_repository
from auth import roles
from core import env, razorpay
from core.errors import AppError

from . import repository, schemas

TOTAL_BILLING_CYCLES = 12
SUBSCRIPTION_CANCELLED = "cancelled"

PAYMENT_PROVIDER_FAILED = "Payment provider request failed, please try again."
PAYMENT_NOT_VERIFIED = "Payment not verified, please try again."

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def refund_period() -> timedelta:
    return timedelta(days=env.env_int("REFUND_PERIOD_DAYS", 14))


async def _call_razorpay(call: Awaitable[dict[str, Any]]) -> dict[str, Any]:
    try:
        return await call
    except razorpay.RazorpayError as exc:
        logger.warning("razorpay_call_failed error=%s", exc)
        raise AppError(PAYMENT_PROVIDER_FAILED, status.HTTP_502_BAD_GATEWAY) from exc


def razorpay_key() -> str:
    key = razorpay.key_id()
    if not key:
        raise AppError("Payments are not configured.", status.HTTP_503_SERVICE_UNAVAILABLE)
    return key


async def subscribe(current_user: dict) -> dict:
    if roles.is_admin(current_user):
        raise AppError("Admin cannot purchase a subscription.")
    if roles.has_active_subscription(current_user):
        raise AppError("You already have an active subscription.")

    subscription = await _call_razorpay(
        razorpay.create_subscription(plan=razorpay.plan_id(), total_count=TOTAL_BILLING_CYCLES)
    )
    subscription_id = str(subscription["id"])
    await user_repository.set_subscription(
        int(current_user["id"]),
        subscription_id=subscription_id,
        status=str(subscription.get("status") or "created"),
    )
    logger.info("subscription_created user_id=%s subscription_id=%s", current_user["id"], subscription_id)
    return {"subscription_id": subscription_id, "status": subscription.get("status")}


async def verify(current_user: dict, payload: schemas.VerifySubscriptionRequest) -> dict:
    user_id = int(current_user["id"])
    if roles.has_active_subscription(current_user):
        raise AppError("Subscription is already active.")

    stored_subscription_id = str(current_user.get("subscription_id") or "")
    signature_ok = razorpay.verify_subscription_signature(
        payment_id=payload.razorpay_payment_id,
        subscription_id=payload.razorpay_subscription_id,
        signature=payload.razorpay_signature,
    )
    if stored_subscription_id != payload.razorpay_subscription_id or not signature_ok:
        logger.warning(
            "subscription_verification_failed user_id=%s subscription_id=%s",
            user_id,
            payload.razorpay_subscription_id,
        )
        raise AppError(PAYMENT_NOT_VERIFIED)

    if await repository.get_by_payment_id(payload.razorpay_payment_id) is not None:
        logger.warning("payment_replayed user_id=%s payment_id=%s", user_id, payload.razorpay_payment_id)
        raise AppError("Payment has already been verified.")

    payment = await repository.create_payment(
        user_id=user_id,
        razorpay_payment_id=payload.razorpay_payment_id,
        razorpay_subscription_id=payload.razorpay_subscription_id,
        razorpay_signature=payload.razorpay_signature,
    )
    if payment is None:
        raise AppError("Payment has already been verified.")

    user_row = await user_repository.set_subscription(
        user_id,
        subscription_id=stored_subscription_id,
        status=roles.SUBSCRIPTION_ACTIVE,
    )
    logger.info("subscription_verified user_id=%s payment_id=%s", user_id, payment["id"])
    return user_row or current_user


async def unsubscribe(current_user: dict) -> None:
    if roles.is_admin(current_user):
        raise AppError("Admin does not need to cancel a subscription.")

    user_id = int(current_user["id"])
    subscription_id = str(current_user.get("subscription_id") or "")
    if not subscription_id:
        raise AppError("You do not have a subscription to cancel.")

    if current_user.get("subscription_status") == SUBSCRIPTION_CANCELLED:
        logger.info("subscription_already_cancelled user_id=%s subscription_id=%s", user_id, subscription_id)
    else:
        cancelled = await _call_razorpay(razorpay.cancel_subscription(subscription_id))
        await user_repository.set_subscription(
            user_id,
            subscription_id=subscription_id,
            status=str(cancelled.get("status") or SUBSCRIPTION_CANCELLED),
        )
        logger.info("subscription_cancelled user_id=%s subscription_id=%s", user_id, subscription_id)

    payment = await repository.get_latest_by_subscription(subscription_id)
    if payment is None or _utc_now() - payment["created_at"] >= refund_period():
        raise AppError("Refund period is over, so there will not be any refunds provided.")

    await _call_razorpay(razorpay.refund_payment(str(payment["razorpay_payment_id"])))
    await user_repository.set_subscription(user_id, subscription_id=None, status=None)
    await repository.delete_payment(int(payment["id"]))
    logger.info("subscription_refunded user_id=%s payment_id=%s", user_id, payment["razorpay_payment_id"])


def monthly_sales(counts: dict[int, int]) -> tuple[list[int], dict[str, int]]:
    record = [int(counts.get(month, 0)) for month in range(1, 13)]
    named = {calendar.month_name[month]: record[month - 1] for month in range(1, 13)}
    return record, named


async def all_payments(*, count: int, skip: int) -> dict:
    subscriptions = await _call_razorpay(razorpay.list_subscriptions(count=count, skip=skip))
    counts = await repository.monthly_payment_counts(_utc_now().year)
    record, named = monthly_sales(counts)
    return {
        "all_payments": subscriptions,
        "final_months": named,
        "monthly_sales_record": record,
    }
