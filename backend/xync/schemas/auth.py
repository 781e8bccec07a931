"""
Xync Backend — Authentication Schemas
=====================================

What:  Request/response bodies for /auth/register, /auth/login and /auth/me.

Email Normalization:
    Emails are trimmed and lower-cased here, before they ever reach the
    service, so "A@X.com" and "a@x.com" are the same account and the
    storage-level UNIQUE(email) is effectively case-insensitive.

Passwords are accepted as-is (no trimming) and never appear in any response
model or log line.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class RegisterRequest(BaseModel):
    email: EmailStr = Field(description="Login email (case-insensitive)")
    password: str = Field(min_length=8, max_length=1024, description="At least 8 characters")
    name: str = Field(min_length=1, max_length=255, description="Display name")

    normalize_email = field_validator("email", mode="before")(_normalize_email)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Name is required")
        return stripped


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=1024)

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class UserResponse(BaseModel):
    """Public view of an account. The password hash is never exposed."""
    id: uuid.UUID
    email: str
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """
    Returned by both register (201) and login (200).

    `expires_at` equals the token's `exp` claim; clients should re-login
    after it passes.
    """
    token: str = Field(description="Bearer token for the Authorization header")
    token_type: str = Field(default="bearer")
    expires_at: datetime = Field(description="Token expiry (UTC)")
    user: UserResponse
