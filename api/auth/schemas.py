"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

FULL_NAME_MIN = 5
FULL_NAME_MAX = 50
PASSWORD_MIN = 8
PASSWORD_MAX = 128


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=PASSWORD_MIN, max_length=PASSWORD_MAX)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX)
    new_password: str = Field(..., min_length=PASSWORD_MIN, max_length=PASSWORD_MAX)


class Avatar(BaseModel):
    public_id: str | None = None
    secure_url: str | None = None


class Subscription(BaseModel):
    id: str | None = None
    status: str | None = None


class UserResponse(BaseModel):
    id: int
    full_name: str
    email: str
    role: str
    avatar: Avatar
    subscription: Subscription
    created_at: datetime
