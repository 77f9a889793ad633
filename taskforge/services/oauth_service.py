"""
Google sign-in.

GoogleOAuthClient talks to Google; OAuthService maps a Google profile
onto a local account, linking or creating as needed.
"""

from __future__ import annotations

import logging
import re
import time
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.config import Settings
from taskforge.core.exceptions import Conflict, ExternalDeliveryError
from taskforge.core.security import random_username_suffix
from taskforge.models.user import User
from taskforge.schemas.auth import GoogleProfile

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthClient:
    """Authorization-code flow against Google's OAuth 2.0 endpoints."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def authorization_url(self, state: str) -> str:
        query = urlencode(
            {
                "client_id": self.settings.GOOGLE_CLIENT_ID,
                "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
                "response_type": "code",
                "scope": "openid email profile",
                "state": state,
                "prompt": "select_account",
            }
        )
        return f"{GOOGLE_AUTH_URL}?{query}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """
        Exchange an authorization code for the signed-in user's profile.

        Raises:
            ExternalDeliveryError: If Google rejects the code or is unreachable.
        """
        try:
            async with httpx.AsyncClient(timeout=self.settings.HTTP_TIMEOUT_SECONDS) as client:
                token_resp = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.settings.GOOGLE_CLIENT_ID,
                        "client_secret": self.settings.GOOGLE_CLIENT_SECRET,
                        "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
                        "grant_type": "authorization_code",
                    },
                )
                token_resp.raise_for_status()
                access_token = token_resp.json()["access_token"]

                info_resp = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                info_resp.raise_for_status()
                info = info_resp.json()

            return GoogleProfile(
                google_id=info["sub"],
                email=info.get("email"),
                email_verified=info.get("email_verified", False),
                display_name=info.get("name") or "",
                picture=info.get("picture"),
            )
        except (httpx.HTTPError, KeyError, TypeError, AttributeError, ValidationError) as exc:
            logger.error("Google OAuth exchange failed: %s", exc)
            raise ExternalDeliveryError("Google sign-in failed.") from exc


class OAuthService:
    """Resolves external identities to local users."""

    def __init__(self, db: AsyncSession, settings: Settings) -> None:
        self.db = db
        self.settings = settings

    async def resolve_user(self, profile: GoogleProfile) -> User:
        """
        Find, link, or create the local user for a Google profile.

        - Existing google_id: returned unchanged
        - Existing email without google_id: linked if Google verified the email,
          avatar adopted if Google has one
        - Otherwise: new password-less user with a unique generated username
        """
        result = await self.db.execute(select(User).where(User.google_id == profile.google_id))
        user = result.scalar_one_or_none()
        if user is not None:
            logger.info("Google login for existing linked user %s", user.email)
            return user

        if not profile.email:
            raise ExternalDeliveryError("Google account has no email address.")
        email = profile.email.lower()

        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is not None:
            if user.google_id is not None:
                raise Conflict(
                    "This email is linked to a different Google account.",
                    code="GOOGLE_ACCOUNT_MISMATCH",
                )
            if not profile.email_verified:
                raise Conflict(
                    "Google has not verified this email address.",
                    code="GOOGLE_EMAIL_UNVERIFIED",
                )
            logger.info("Linking Google id to existing user %s", user.email)
            user.google_id = profile.google_id
            if profile.picture:
                user.profile_image_url = profile.picture
            try:
                await self.db.commit()
            except IntegrityError as exc:
                await self.db.rollback()
                raise Conflict(
                    "This Google account is already linked.", code="ACCOUNT_EXISTS"
                ) from exc
            return user

        username = await self._unique_username(profile.display_name)
        user = User(
            username=username,
            email=email,
            google_id=profile.google_id,
            profile_image_url=profile.picture,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise Conflict("Account already exists.", code="ACCOUNT_EXISTS") from exc
        logger.info("Created user %s (%s) from Google profile", user.username, user.email)
        return user

    async def _unique_username(self, display_name: str) -> str:
        base = re.sub(r"\s+", "", display_name)[:90]
        if len(base) < 3:
            base = f"user{int(time.time() * 1000)}"

        candidate = base
        for _ in range(self.settings.OAUTH_USERNAME_MAX_ATTEMPTS):
            taken = await self.db.execute(select(User.id).where(User.username == candidate))
            if taken.first() is None:
                return candidate
            logger.info("Username %r taken, generating another", candidate)
            candidate = f"{base}{random_username_suffix()}"

        raise Conflict("Could not generate a unique username.", code="USERNAME_EXHAUSTED")
