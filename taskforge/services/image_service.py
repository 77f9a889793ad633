"""
Profile image hosting on Cloudinary.

The Cloudinary SDK is synchronous, so calls run in the threadpool.
"""

from __future__ import annotations

import base64
import logging

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi.concurrency import run_in_threadpool

from taskforge.core.config import Settings
from taskforge.core.exceptions import ExternalDeliveryError

logger = logging.getLogger(__name__)


class ImageHost:
    """Upload and remove images in the configured Cloudinary folder."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )

    def public_id_for(self, user_id: str) -> str:
        return f"user-{user_id}-profile"

    def hosts(self, url: str) -> bool:
        """True if the URL points at an asset in our Cloudinary cloud."""
        return f"res.cloudinary.com/{self.settings.CLOUDINARY_CLOUD_NAME}/" in url

    async def upload(self, user_id: str, content: bytes, content_type: str) -> str:
        """
        Upload (overwriting) the user's profile image.

        Returns the secure URL of the stored asset.
        """
        data_uri = f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                data_uri,
                folder=self.settings.CLOUDINARY_FOLDER,
                public_id=self.public_id_for(user_id),
                overwrite=True,
                resource_type="image",
                timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            )
            return result["secure_url"]
        except (CloudinaryError, KeyError, TypeError) as exc:
            logger.error("Image upload for user %s failed: %s", user_id, exc)
            raise ExternalDeliveryError("Failed to upload image.") from exc

    async def destroy(self, user_id: str) -> None:
        public_id = f"{self.settings.CLOUDINARY_FOLDER}/{self.public_id_for(user_id)}"
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.destroy,
                public_id,
                invalidate=True,
                timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            )
        except CloudinaryError as exc:
            logger.error("Image removal for user %s failed: %s", user_id, exc)
            raise ExternalDeliveryError("Failed to remove image.") from exc
        logger.info("Destroyed %s: %s", public_id, result.get("result"))
