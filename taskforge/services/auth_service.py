"""
Authentication business logic.

Handles registration, login, password recovery and password changes.
All business logic lives here; routers only handle HTTP concerns.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.config import Settings
from taskforge.core.exceptions import (
    Conflict,
    ExternalDeliveryError,
    ExternalIdentityAccount,
    InvalidCredentials,
    InvalidResetToken,
)
from taskforge.core.security import (
    EMAIL_RESET_TTL,
    SMS_RESET_TTL,
    create_access_token,
    create_email_reset_token,
    create_sms_reset_code,
    hash_password,
    verify_password,
)
from taskforge.models.user import User
from taskforge.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from taskforge.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def generic_reset_message(method: str) -> str:
    """The one response a forgot-password caller sees, account or not."""
    noun = "link" if method == "email" else "code"
    return f"If an account with that {method} exists, a password reset {noun} has been sent."


class AuthService:
    """Handles all authentication operations."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        self.db = db
        self.settings = settings
        self.notifier = notifier

    # -----------------------------------------------------------------------
    # Register
    # -----------------------------------------------------------------------

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """
        Register a new user.

        - Validates email and username uniqueness
        - Hashes password
        - Creates user record
        - Issues a session token
        """
        result = await self.db.execute(
            select(User).where(or_(User.email == data.email, User.username == data.username))
        )
        existing = result.scalars().all()
        for other in existing:
            if other.email == data.email:
                if other.is_external_only:
                    raise Conflict(
                        "An account with that email already exists via Google sign-in. "
                        "Please sign in with Google.",
                        code="EMAIL_REGISTERED_WITH_GOOGLE",
                    )
                raise Conflict("User with that email already exists", code="EMAIL_TAKEN")
        if existing:
            raise Conflict("Username already taken", code="USERNAME_TAKEN")

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            await self.db.rollback()
            raise Conflict("User with that email or username already exists") from exc

        logger.info("Registered user %s (%s)", user.username, user.email)
        return self._auth_response(user)

    # -----------------------------------------------------------------------
    # Login
    # -----------------------------------------------------------------------

    async def login(self, data: LoginRequest) -> AuthResponse:
        """
        Authenticate user with email + password.

        Raises InvalidCredentials for unknown email or wrong password
        (never reveals which). Google-only accounts are told to use Google.
        """
        result = await self.db.execute(select(User).where(User.email == data.email))
        user = result.scalar_one_or_none()

        if user is None:
            logger.info("Login failed for %s", data.email)
            raise InvalidCredentials()

        if user.is_external_only:
            raise ExternalIdentityAccount()

        if not verify_password(data.password, user.password_hash):
            logger.info("Login failed for %s", data.email)
            raise InvalidCredentials()

        logger.info("User %s logged in", user.email)
        return self._auth_response(user)

    # -----------------------------------------------------------------------
    # Forgot Password
    # -----------------------------------------------------------------------

    async def forgot_password(self, data: ForgotPasswordRequest) -> str:
        """
        Issue a reset code over the requested channel.

        Returns the same message whether or not the contact exists.
        A code whose delivery fails is cleared before the error surfaces.
        """
        if data.method == "email":
            stmt = select(User).where(User.email == data.email)
        else:
            stmt = select(User).where(User.phone_number == data.phone_number)
        user = (await self.db.execute(stmt)).scalar_one_or_none()

        if user is None:
            logger.info("Password reset requested for unknown %s contact", data.method)
            return generic_reset_message(data.method)

        if user.is_external_only:
            raise ExternalIdentityAccount()

        user.clear_reset_state()
        now = datetime.now(UTC)
        if data.method == "email":
            code = create_email_reset_token()
            user.reset_password_token = code
            user.reset_password_expires_at = now + EMAIL_RESET_TTL
        else:
            code = await self._unused_sms_code(now)
            user.verification_code = code
            user.verification_code_expires_at = now + SMS_RESET_TTL
        await self.db.commit()
        logger.info("Issued %s reset code for user %s", data.method, user.id)

        try:
            if data.method == "email":
                await self.notifier.send_password_reset_email(user.email, code)
            else:
                await self.notifier.send_password_reset_sms(user.phone_number, code)
        except Exception as exc:
            logger.warning("Rolling back %s reset code for user %s: %r", data.method, user.id, exc)
            user.clear_reset_state()
            await self.db.commit()
            if isinstance(exc, ExternalDeliveryError):
                raise
            channel = "email" if data.method == "email" else "SMS"
            raise ExternalDeliveryError(f"Failed to send reset {channel}.") from exc

        return generic_reset_message(data.method)

    async def _unused_sms_code(self, now: datetime) -> str:
        """A 6-digit code no other user currently holds unexpired."""
        while True:
            code = create_sms_reset_code()
            clash = await self.db.execute(
                select(User.id).where(
                    User.verification_code == code,
                    User.verification_code_expires_at > now,
                )
            )
            if clash.first() is None:
                return code
            logger.info("SMS reset code collided with a live code, regenerating")

    # -----------------------------------------------------------------------
    # Reset Password
    # -----------------------------------------------------------------------

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Complete password reset with an email token or SMS code.

        The code must match exactly one user with an unexpired deadline.
        Both channels are cleared afterwards.
        """
        now = datetime.now(UTC)
        matches = (
            await self.db.execute(
                select(User).where(
                    User.reset_password_token == token,
                    User.reset_password_expires_at > now,
                )
            )
        ).scalars().all()

        if not matches:
            matches = (
                await self.db.execute(
                    select(User).where(
                        User.verification_code == token,
                        User.verification_code_expires_at > now,
                    )
                )
            ).scalars().all()

        if len(matches) != 1:
            if matches:
                logger.warning("Reset code matched %d users; rejecting", len(matches))
            raise InvalidResetToken()

        user = matches[0]
        user.clear_reset_state()

        if user.is_external_only:
            await self.db.commit()
            raise ExternalIdentityAccount()

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("Password reset completed for user %s", user.id)

    # -----------------------------------------------------------------------
    # Change Password
    # -----------------------------------------------------------------------

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if user.is_external_only:
            raise ExternalIdentityAccount()

        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect.")

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("Password changed for user %s", user.id)

    # -----------------------------------------------------------------------
    # Session tokens
    # -----------------------------------------------------------------------

    def issue_token(self, user: User) -> str:
        return create_access_token(str(user.id), self.settings)

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            **UserResponse.model_validate(user).model_dump(),
            token=self.issue_token(user),
        )
