"""
User ORM model.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskforge.models.base import Base, CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from taskforge.models.task import Task


class User(Base, UUIDMixin, CreatedAtMixin):
    """Represents an account (email/password, Google, or both)."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True, unique=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # OAuth
    google_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)

    # Password reset, email channel
    reset_password_token: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    reset_password_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Password reset, SMS channel
    verification_code: Mapped[str | None] = mapped_column(String(6), nullable=True, index=True)
    verification_code_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    tasks: Mapped[list[Task]] = relationship(
        "Task", back_populates="owner", cascade="all, delete-orphan"
    )

    @property
    def is_external_only(self) -> bool:
        """True when the account can only sign in through Google."""
        return self.password_hash is None

    def clear_reset_state(self) -> None:
        """Drop any pending reset token or SMS code."""
        self.reset_password_token = None
        self.reset_password_expires_at = None
        self.verification_code = None
        self.verification_code_expires_at = None

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
