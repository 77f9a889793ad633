"""
Security utilities.

Password hashing, JWT session tokens, password reset codes.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt as _bcrypt
from jose import JWTError, jwt

from taskforge.core.config import Settings

EMAIL_RESET_TTL = timedelta(hours=1)
SMS_RESET_TTL = timedelta(minutes=15)


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt (cost=12)."""
    password_bytes = password.encode("utf-8")[:72]
    salt = _bcrypt.gensalt(rounds=12)
    return _bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    password_bytes = plain_password.encode("utf-8")[:72]
    try:
        return _bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ---------------------------------------------------------------------------
# JWT session tokens
# ---------------------------------------------------------------------------

def create_access_token(user_id: str, settings: Settings) -> str:
    """
    Create a signed session token.

    Args:
        user_id: The user's UUID as string.
        settings: Application settings holding the signing secret and lifetime.

    Returns:
        Signed JWT string.
    """
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": user_id,
        "jti": str(uuid.uuid4()),
        "type": "access",
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and validate a session token.

    Raises:
        JWTError: If the token is invalid, expired, tampered or not an access token.
    """
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Not an access token")
    return payload


# ---------------------------------------------------------------------------
# Password reset codes
# ---------------------------------------------------------------------------

def create_email_reset_token() -> str:
    """Generate the hex token embedded in a reset link."""
    return secrets.token_hex(20)


def create_sms_reset_code() -> str:
    """Generate a 6-digit numeric reset code."""
    return str(100000 + secrets.randbelow(900000))


def create_oauth_state() -> str:
    """Generate the anti-forgery state value for an OAuth round trip."""
    return secrets.token_urlsafe(24)


def random_username_suffix() -> str:
    """Four hex characters appended to a colliding username."""
    return secrets.token_hex(2)
