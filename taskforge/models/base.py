"""
Base model classes and mixins.

Provides Base declarative class, UUIDMixin and CreatedAtMixin.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class CreatedAtMixin:
    """
    Mixin that adds a created_at timestamp.

    Set in Python rather than by the server so listings ordered by
    creation time keep sub-second precision on every backend.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
        doc="Timestamp when the record was created",
    )


class UUIDMixin:
    """
    Mixin that adds UUID primary key.

    All models use UUID as primary key so identifiers are not guessable.
    """

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        doc="Unique identifier for the record",
    )
