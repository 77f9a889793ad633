"""
FastAPI dependency injection functions.

Provides settings, provider clients, and the current user.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.config import Settings, get_settings
from taskforge.core.database import get_db
from taskforge.core.exceptions import Unauthorized
from taskforge.core.security import decode_access_token
from taskforge.models.user import User
from taskforge.services.image_service import ImageHost
from taskforge.services.notification_service import NotificationDispatcher
from taskforge.services.oauth_service import GoogleOAuthClient

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# HTTP Bearer scheme (auto_error=False so we can return custom 401)
# ---------------------------------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Session cookie helpers
# ---------------------------------------------------------------------------

def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def _clear_cookie_header(settings: Settings) -> dict[str, str]:
    scratch = Response()
    clear_session_cookie(scratch, settings)
    return {"set-cookie": scratch.headers["set-cookie"]}


# ---------------------------------------------------------------------------
# External providers
# ---------------------------------------------------------------------------

def get_notification_dispatcher(
    settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    return NotificationDispatcher(settings)


def get_google_client(settings: Settings = Depends(get_settings)) -> GoogleOAuthClient:
    return GoogleOAuthClient(settings)


def get_image_host(settings: Settings = Depends(get_settings)) -> ImageHost:
    return ImageHost(settings)


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Validate the session token and return the authenticated User.

    The cookie wins over the Authorization header when both are sent.

    Raises 401 if:
    - No token provided
    - Token is invalid or expired (the cookie is cleared as well)
    - User does not exist
    """
    token = request.cookies.get(settings.COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials

    if not token:
        logger.debug("Rejected request to %s: no token", request.url.path)
        raise Unauthorized(headers={"WWW-Authenticate": "Bearer"})

    try:
        payload = decode_access_token(token, settings)
        user_id = UUID(str(payload.get("sub", "")))
    except (JWTError, ValueError):
        logger.debug("Rejected request to %s: token failed verification", request.url.path)
        raise Unauthorized(
            headers={"WWW-Authenticate": "Bearer", **_clear_cookie_header(settings)}
        )

    user = await db.get(User, user_id)
    if user is None:
        logger.debug("Rejected request to %s: user %s no longer exists", request.url.path, user_id)
        raise Unauthorized(headers={"WWW-Authenticate": "Bearer"})

    return user
