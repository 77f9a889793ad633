"""
Task business logic.

Handles task CRUD. Every query is scoped by the owning user.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.exceptions import Forbidden, NotFound
from taskforge.models.task import Task, TaskStatus
from taskforge.models.user import User
from taskforge.schemas.task import (
    TaskCreateRequest,
    TaskEnvelope,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
)

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class TaskService:
    """Handles all task operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # List Tasks
    # -----------------------------------------------------------------------

    async def list_tasks(
        self,
        owner: User,
        status: TaskStatus | None = None,
        search: str | None = None,
    ) -> TaskListResponse:
        """List the owner's tasks, newest first, with optional filters."""
        stmt = select(Task).where(Task.user_id == owner.id)

        if status is not None:
            stmt = stmt.where(Task.status == status)
        if search:
            pattern = _like_pattern(search)
            stmt = stmt.where(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\"),
                )
            )

        stmt = stmt.order_by(Task.created_at.desc())
        tasks = (await self.db.execute(stmt)).scalars().all()

        return TaskListResponse(
            message="Tasks fetched successfully",
            tasks=[TaskResponse.model_validate(t) for t in tasks],
        )

    # -----------------------------------------------------------------------
    # Get Task
    # -----------------------------------------------------------------------

    async def get_task(self, task_id: UUID, owner: User) -> TaskEnvelope:
        task = await self._get_owned_task(task_id, owner, action="view")
        return TaskEnvelope(
            message="Task fetched successfully",
            task=TaskResponse.model_validate(task),
        )

    # -----------------------------------------------------------------------
    # Create Task
    # -----------------------------------------------------------------------

    async def create_task(self, data: TaskCreateRequest, owner: User) -> TaskEnvelope:
        task = Task(
            user_id=owner.id,
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            status=data.status,
        )
        self.db.add(task)
        await self.db.commit()
        logger.info("User %s created task %s", owner.id, task.id)

        return TaskEnvelope(
            message="Task created successfully!",
            task=TaskResponse.model_validate(task),
        )

    # -----------------------------------------------------------------------
    # Update Task
    # -----------------------------------------------------------------------

    async def update_task(
        self,
        task_id: UUID,
        data: TaskUpdateRequest,
        owner: User,
    ) -> TaskEnvelope:
        """Apply only the fields present in the request body."""
        task = await self._get_owned_task(task_id, owner, action="update")

        for field in data.model_fields_set:
            setattr(task, field, getattr(data, field))

        await self.db.commit()
        return TaskEnvelope(
            message="Task updated successfully!",
            task=TaskResponse.model_validate(task),
        )

    # -----------------------------------------------------------------------
    # Delete Task
    # -----------------------------------------------------------------------

    async def delete_task(self, task_id: UUID, owner: User) -> None:
        task = await self._get_owned_task(task_id, owner, action="delete")
        await self.db.delete(task)
        await self.db.commit()
        logger.info("User %s deleted task %s", owner.id, task_id)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _get_owned_task(self, task_id: UUID, owner: User, action: str) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found", code="TASK_NOT_FOUND")
        if task.user_id != owner.id:
            logger.warning("User %s tried to %s task %s owned by %s", owner.id, action, task_id, task.user_id)
            raise Forbidden(f"Not authorized to {action} this task")
        return task
