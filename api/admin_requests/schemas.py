"""
Admin-request API schemas.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

PENDING = "PENDING"
APPROVED = "APPROVED"
REJECTED = "REJECTED"

RequestStatus = Literal["PENDING", "APPROVED", "REJECTED"]


class CreateAdminRequest(BaseModel):
    reason: str = Field(..., min_length=10, max_length=500)
