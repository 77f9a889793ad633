"""
Task ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskforge.models.base import Base, CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from taskforge.models.user import User


class TaskStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class Task(Base, UUIDMixin, CreatedAtMixin):
    """A to-do item owned by exactly one user."""

    __tablename__ = "tasks"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, name="task_status", native_enum=False, length=20),
        nullable=False,
        default=TaskStatus.pending,
    )

    owner: Mapped[User] = relationship("User", back_populates="tasks")

    def __repr__(self) -> str:
        return f"<Task id={self.id} user_id={self.user_id} status={self.status.value}>"
