"""
Payment API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class VerifySubscriptionRequest(BaseModel):
    razorpay_payment_id: str = Field(..., min_length=1, max_length=100)
    razorpay_subscription_id: str = Field(..., min_length=1, max_length=100)
    razorpay_signature: str = Field(..., min_length=1, max_length=256)
