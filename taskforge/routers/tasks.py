"""
Task management endpoints.

CRUD operations on the current user's tasks.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskforge.core.database import get_db
from taskforge.core.dependencies import get_current_user
from taskforge.models.task import TaskStatus
from taskforge.models.user import User
from taskforge.schemas.base import MessageResponse
from taskforge.schemas.task import (
    TaskCreateRequest,
    TaskEnvelope,
    TaskListResponse,
    TaskUpdateRequest,
)
from taskforge.services.task_service import TaskService

router = APIRouter()


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db=db)


# ---------------------------------------------------------------------------
# List Tasks
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=TaskListResponse,
    summary="List the current user's tasks",
)
async def list_tasks(
    status_filter: TaskStatus | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=200),
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    return await service.list_tasks(current_user, status=status_filter, search=search)


# ---------------------------------------------------------------------------
# Create Task
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=TaskEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    data: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    return await service.create_task(data, current_user)


# ---------------------------------------------------------------------------
# Get Task
# ---------------------------------------------------------------------------

@router.get(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Get a single task",
)
async def get_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    return await service.get_task(task_id, current_user)


# ---------------------------------------------------------------------------
# Update Task
# ---------------------------------------------------------------------------

@router.put(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Update a task",
)
async def update_task(
    task_id: UUID,
    data: TaskUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    """Only fields present in the body are changed."""
    return await service.update_task(task_id, data, current_user)


# ---------------------------------------------------------------------------
# Delete Task
# ---------------------------------------------------------------------------

@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    summary="Delete a task",
)
async def delete_task(
    task_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
) -> MessageResponse:
    await service.delete_task(task_id, current_user)
    return MessageResponse(message="Task removed successfully!")
