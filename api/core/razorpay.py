"""
Razorpay HTTP client helpers.

Used endpoints (basic auth with key id / key secret):
- POST /subscriptions                     -> {"id": "sub_...", "status": "created", ...}
- POST /subscriptions/{id}/cancel         -> {"id": "sub_...", "status": "cancelled", ...}
- GET  /subscriptions?count=&skip=        -> {"entity": "collection", "count": n, "items": [...]}
- POST /payments/{id}/refund              -> {"id": "rfnd_...", "status": "processed", ...}
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any

import httpx

from . import env

DEFAULT_BASE_URL = "https://api.razorpay.com/v1"


# Razorpay failures are explicit and separable from other runtime errors.
class RazorpayError(RuntimeError):
    pass


def key_id() -> str:
    return env.env_str("RAZORPAY_KEY_ID")


def key_secret() -> str:
    return env.env_str("RAZORPAY_SECRET")


def plan_id() -> str:
    return env.env_str("RAZORPAY_PLAN_ID")


def base_url() -> str:
    return env.env_str("RAZORPAY_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def _credentials() -> tuple[str, str]:
    kid, secret = key_id(), key_secret()
    if not kid or not secret:
        raise RazorpayError("RAZORPAY_KEY_ID / RAZORPAY_SECRET are not set.")
    return kid, secret


async def _request(
    method: str,
    path: str,
    *,
    json: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
    timeout_s: float = 30.0,
) -> dict[str, Any]:
    auth = httpx.BasicAuth(*_credentials())
    try:
        async with httpx.AsyncClient(base_url=base_url(), auth=auth, timeout=timeout_s) as client:
            resp = await client.request(method, path, json=json, params=params)
    except httpx.HTTPError as exc:
        raise RazorpayError(f"Razorpay request failed: {exc}") from exc

    if resp.status_code >= 400:
        description = resp.text[:500]
        try:
            error = resp.json().get("error") or {}
            description = str(error.get("description") or description)
        except ValueError:
            pass
        raise RazorpayError(f"Razorpay {method} {path} failed: {resp.status_code} {description}")

    data = resp.json()
    if not isinstance(data, dict):
        raise RazorpayError("Razorpay returned a non-object response.")
    return data


async def create_subscription(*, plan: str, total_count: int = 12, customer_notify: bool = True) -> dict[str, Any]:
    plan = (plan or "").strip()
    if not plan:
        raise RazorpayError("Razorpay plan id is empty.")
    data = await _request(
        "POST",
        "/subscriptions",
        json={
            "plan_id": plan,
            "total_count": total_count,
            "customer_notify": 1 if customer_notify else 0,
        },
    )
    if not data.get("id"):
        raise RazorpayError("Razorpay returned a subscription without an id.")
    return data


async def cancel_subscription(subscription_id: str) -> dict[str, Any]:
    return await _request("POST", f"/subscriptions/{subscription_id}/cancel", json={})


async def refund_payment(payment_id: str, *, speed: str = "optimum") -> dict[str, Any]:
    return await _request("POST", f"/payments/{payment_id}/refund", json={"speed": speed})


async def list_subscriptions(*, count: int = 10, skip: int = 0) -> dict[str, Any]:
    return await _request("GET", "/subscriptions", params={"count": count, "skip": skip})


def subscription_signature(*, payment_id: str, subscription_id: str, secret: str) -> str:
    message = f"{payment_id}|{subscription_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_subscription_signature(
    *,
    payment_id: str,
    subscription_id: str,
    signature: str,
    secret: str | None = None,
) -> bool:
    """
    Check the signature Razorpay Checkout hands back after a subscription payment.
    """
    secret = key_secret() if secret is None else secret
    if not secret or not signature:
        return False
    expected = subscription_signature(payment_id=payment_id, subscription_id=subscription_id, secret=secret)
    return hmac.compare_digest(expected, signature.strip())
