"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
"""

from taskforge.models.base import Base, CreatedAtMixin, UUIDMixin
from taskforge.models.user import User
from taskforge.models.task import Task, TaskStatus

__all__ = [
    "Base",
    "CreatedAtMixin",
    "UUIDMixin",
    "User",
    "Task",
    "TaskStatus",
]
