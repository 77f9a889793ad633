"""
Profile business logic.

Phone number updates and profile image upload/removal.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.config import Settings
from taskforge.core.exceptions import Conflict, ValidationError
from taskforge.models.user import User
from taskforge.schemas.auth import UserResponse
from taskforge.schemas.user import (
    ProfileImageResponse,
    ProfileResponse,
    ProfileUpdateRequest,
)
from taskforge.services.image_service import ImageHost

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession, settings: Settings, images: ImageHost | None = None) -> None:
        self.db = db
        self.settings = settings
        self.images = images

    async def update_profile(self, user: User, data: ProfileUpdateRequest) -> ProfileResponse:
        if "phone_number" in data.model_fields_set:
            user.phone_number = data.phone_number

        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise Conflict("Phone number is already in use", code="PHONE_TAKEN") from exc

        return ProfileResponse(
            message="Profile updated successfully!",
            user=UserResponse.model_validate(user),
        )

    async def upload_profile_image(
        self,
        user: User,
        content: bytes | None,
        content_type: str | None,
    ) -> ProfileImageResponse:
        if not content:
            raise ValidationError("No image file uploaded.")
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Uploaded file must be an image.")
        if len(content) > self.settings.MAX_IMAGE_BYTES:
            raise ValidationError("Image is too large.")

        url = await self.images.upload(str(user.id), content, content_type)
        user.profile_image_url = url
        await self.db.commit()
        logger.info("Updated profile image for user %s", user.id)

        return ProfileImageResponse(
            message="Profile image updated successfully",
            profile_image_url=url,
        )

    async def remove_profile_image(self, user: User) -> None:
        # Provider avatars (e.g. Google) are only unlinked, never destroyed.
        if user.profile_image_url and self.images.hosts(user.profile_image_url):
            await self.images.destroy(str(user.id))

        user.profile_image_url = None
        await self.db.commit()
        logger.info("Removed profile image for user %s", user.id)
