"""
Profile endpoints.

Phone number and profile image for the current user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.config import Settings, get_settings
from taskforge.core.database import get_db
from taskforge.core.dependencies import get_current_user, get_image_host
from taskforge.models.user import User
from taskforge.schemas.base import MessageResponse
from taskforge.schemas.user import (
    ProfileImageResponse,
    ProfileResponse,
    ProfileUpdateRequest,
)
from taskforge.services.image_service import ImageHost
from taskforge.services.user_service import UserService

router = APIRouter()


def get_user_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    images: ImageHost = Depends(get_image_host),
) -> UserService:
    return UserService(db=db, settings=settings, images=images)


@router.put("/profile", response_model=ProfileResponse, summary="Update profile fields")
async def update_profile(
    data: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    return await service.update_profile(current_user, data)


@router.put(
    "/profile-image",
    response_model=ProfileImageResponse,
    summary="Upload or replace the profile image",
)
async def upload_profile_image(
    profile_image: UploadFile | None = File(default=None, alias="profileImage"),
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> ProfileImageResponse:
    content = await profile_image.read() if profile_image is not None else None
    content_type = profile_image.content_type if profile_image is not None else None
    return await service.upload_profile_image(current_user, content, content_type)


@router.delete(
    "/profile-image",
    response_model=MessageResponse,
    summary="Remove the profile image",
)
async def remove_profile_image(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> MessageResponse:
    await service.remove_profile_image(current_user)
    return MessageResponse(message="Profile image removed successfully.")
