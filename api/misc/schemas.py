"""
Contact form schema.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=320)
    message: str = Field(..., min_length=1, max_length=5000)
