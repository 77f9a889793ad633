"""
Authentication endpoints.

Register, login, logout, me, Google OAuth, password reset and change.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.config import Settings, get_settings
from taskforge.core.database import get_db
from taskforge.core.dependencies import (
    clear_session_cookie,
    get_current_user,
    get_google_client,
    get_notification_dispatcher,
    set_session_cookie,
)
from taskforge.core.exceptions import AppError
from taskforge.core.security import create_access_token, create_oauth_state
from taskforge.models.user import User
from taskforge.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
)
from taskforge.schemas.base import MessageResponse
from taskforge.services.auth_service import AuthService
from taskforge.services.notification_service import NotificationDispatcher
from taskforge.services.oauth_service import GoogleOAuthClient, OAuthService

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_COOKIE = "oauth_state"


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> AuthService:
    """Dependency that constructs AuthService."""
    return AuthService(db=db, settings=settings, notifier=notifier)


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Create a new user account.

    - Email and username must be globally unique
    - Returns public user fields and a session token
    """
    return await service.register(data)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login with email and password",
)
async def login(
    data: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """
    Authenticate with email and password.

    Sets the HTTP-only session cookie and also returns the token.
    """
    result = await service.login(data)
    set_session_cookie(response, result.token, settings)
    return result


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------

@router.get(
    "/logout",
    response_model=MessageResponse,
    summary="Clear the session cookie",
)
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """Always succeeds, with or without a session."""
    clear_session_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")


# ---------------------------------------------------------------------------
# Me
# ---------------------------------------------------------------------------

@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


# ---------------------------------------------------------------------------
# Google OAuth
# ---------------------------------------------------------------------------

@router.get("/google", summary="Start Google sign-in")
async def google_login(
    google: GoogleOAuthClient = Depends(get_google_client),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    state = create_oauth_state()
    response = RedirectResponse(google.authorization_url(state), status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=600,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/google/callback", summary="Google sign-in callback")
async def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    google: GoogleOAuthClient = Depends(get_google_client),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """
    Resolve the Google profile to a local user, set the session cookie
    and send the browser back to the frontend.
    """
    failure = RedirectResponse(
        f"{settings.FRONTEND_URL}{settings.OAUTH_FAILURE_PATH}",
        status_code=status.HTTP_302_FOUND,
    )
    failure.delete_cookie(OAUTH_STATE_COOKIE)

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or state != expected_state:
        logger.warning("Google callback rejected: missing code or state mismatch")
        return failure

    try:
        profile = await google.fetch_profile(code)
        user = await OAuthService(db, settings).resolve_user(profile)
    except AppError as exc:
        logger.warning("Google sign-in failed: %s", exc.message)
        return failure

    token = create_access_token(str(user.id), settings)
    response = RedirectResponse(
        f"{settings.FRONTEND_URL}{settings.OAUTH_SUCCESS_PATH}",
        status_code=status.HTTP_302_FOUND,
    )
    response.delete_cookie(OAUTH_STATE_COOKIE)
    set_session_cookie(response, token, settings)
    return response


# ---------------------------------------------------------------------------
# Forgot Password
# ---------------------------------------------------------------------------

@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request a password reset link or code",
)
async def forgot_password(
    data: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Initiate password reset by email link or SMS code.

    Returns the same message whether or not the contact exists
    to prevent user enumeration.
    """
    return MessageResponse(message=await service.forgot_password(data))


# ---------------------------------------------------------------------------
# Reset Password
# ---------------------------------------------------------------------------

@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset password using token or code",
)
async def reset_password(
    data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Complete password reset using the emailed token or the SMS code.

    Codes are single-use; email tokens last 1 hour, SMS codes 15 minutes.
    """
    await service.reset_password(data.token, data.new_password)
    return MessageResponse(message="Password has been reset successfully.")


# ---------------------------------------------------------------------------
# Change Password
# ---------------------------------------------------------------------------

@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password while logged in",
)
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await service.change_password(current_user, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully.")
