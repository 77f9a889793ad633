"""
Profile schemas.
"""

from __future__ import annotations

import re

from pydantic import field_validator

from taskforge.schemas.auth import UserResponse
from taskforge.schemas.base import APIModel

PHONE_RE = re.compile(r"^\+?[0-9]{7,15}$")


class ProfileUpdateRequest(APIModel):
    """
    Request body for PUT /users/profile.

    Only fields present in the body are applied; an explicit null clears.
    """

    phone_number: str | None = None

    @field_validator("phone_number")
    @classmethod
    def valid_phone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if not PHONE_RE.match(v):
            raise ValueError("Please fill a valid phone number")
        return v


class ProfileResponse(APIModel):
    message: str
    user: UserResponse


class ProfileImageResponse(APIModel):
    message: str
    profile_image_url: str | None
