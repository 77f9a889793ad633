"""
Task schemas.

Request/response models for task CRUD endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from taskforge.models.task import TaskStatus
from taskforge.schemas.base import APIModel


def _blank_to_none(v: object) -> object:
    if isinstance(v, str) and not v.strip():
        return None
    return v


# ---------------------------------------------------------------------------
# Task Create
# ---------------------------------------------------------------------------

class TaskCreateRequest(APIModel):
    """Request body for POST /tasks."""

    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    due_date: datetime | None = None
    status: TaskStatus = TaskStatus.pending

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def empty_due_date(cls, v: object) -> object:
        return _blank_to_none(v)


# ---------------------------------------------------------------------------
# Task Update
# ---------------------------------------------------------------------------

class TaskUpdateRequest(APIModel):
    """
    Request body for PUT /tasks/{task_id}.

    Presence matters: omitted fields are left alone, null clears
    description and due date.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    due_date: datetime | None = None
    status: TaskStatus | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("status")
    @classmethod
    def status_not_null(cls, v: TaskStatus | None) -> TaskStatus:
        if v is None:
            raise ValueError("Status cannot be null")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def empty_due_date(cls, v: object) -> object:
        return _blank_to_none(v)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TaskResponse(APIModel):
    id: UUID
    user_id: UUID
    title: str
    description: str | None
    due_date: datetime | None
    status: TaskStatus
    created_at: datetime


class TaskEnvelope(APIModel):
    message: str
    task: TaskResponse


class TaskListResponse(APIModel):
    message: str
    tasks: list[TaskResponse]
