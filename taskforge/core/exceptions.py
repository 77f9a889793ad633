"""
Application error taxonomy.

Every error raised by a service is an HTTPException subclass carrying
a machine-readable code, so responses keep the shape
{"detail": {"code": ..., "message": ...}}.
"""

from __future__ import annotations

from collections.abc import Mapping

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "SERVER_ERROR"
    message: str = "Something went wrong"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.code = code or type(self).code
        self.message = message or type(self).message
        super().__init__(
            status_code=type(self).status_code,
            detail={"code": self.code, "message": self.message},
            headers=dict(headers) if headers else None,
        )


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid request"


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "CONFLICT"
    message = "Resource already exists"


class InvalidCredentials(AppError):
    """Wrong email or password. Never says which one."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class ExternalIdentityAccount(AppError):
    """Password operation attempted on a Google-only account."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "EXTERNAL_IDENTITY_ACCOUNT"
    message = "This account uses Google sign-in. Please sign in with Google."


class InvalidResetToken(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_RESET_TOKEN"
    message = "Password reset token/code is invalid or has expired."


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Not authorized"


class Forbidden(AppError):
    # Ownership mismatch is reported as 401 to match the public API contract.
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "FORBIDDEN"
    message = "Not authorized to access this resource"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


class ExternalDeliveryError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "EXTERNAL_DELIVERY_FAILED"
    message = "An external provider request failed"


class ServerError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "SERVER_ERROR"
    message = "Something went wrong"
