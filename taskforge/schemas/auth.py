"""
Authentication schemas.

Request/response models for all auth endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from taskforge.schemas.base import APIModel


# ---------------------------------------------------------------------------
# User (response object embedded in other responses)
# ---------------------------------------------------------------------------

class UserResponse(APIModel):
    """Public user representation. Never carries password or reset state."""

    id: UUID
    username: str
    email: str
    phone_number: str | None = None
    profile_image_url: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

class RegisterRequest(APIModel):
    """Request body for POST /auth/register."""

    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

class LoginRequest(APIModel):
    """Request body for POST /auth/login."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class AuthResponse(UserResponse):
    """Response for register and login: public user fields plus session token."""

    token: str


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------

class ForgotPasswordRequest(APIModel):
    """Request body for POST /auth/forgot-password."""

    method: Literal["email", "sms"] | None = None
    email: EmailStr | None = None
    phone_number: str | None = None

    @model_validator(mode="after")
    def contact_matches_method(self) -> ForgotPasswordRequest:
        if self.method == "email" and self.email:
            self.email = self.email.lower()
            return self
        if self.method == "sms" and self.phone_number and self.phone_number.strip():
            self.phone_number = self.phone_number.strip()
            return self
        raise ValueError(
            "Email or phone number, and a valid method (email/sms) are required."
        )


class ResetPasswordRequest(APIModel):
    """Request body for POST /auth/reset-password."""

    token: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class ChangePasswordRequest(APIModel):
    """Request body for PUT /auth/change-password."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------

class GoogleProfile(APIModel):
    """Identity returned by Google's userinfo endpoint."""

    google_id: str
    email: str | None = None
    email_verified: bool = False
    display_name: str = ""
    picture: str | None = None
