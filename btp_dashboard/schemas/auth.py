"""Pydantic schemas for authentication."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Email/password pair used by sign-in and sign-up."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class UserRead(BaseModel):
    """User representation returned by APIs."""

    id: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class AuthSessionRead(BaseModel):
    """Bearer token issued at sign-in."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead
