"""Pydantic schemas for tasks, task listing, and task statistics."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskmanager.models.task import TaskStatus
from taskmanager.schemas.category import CategoryRef

TITLE_MAX_LEN = 200
DESCRIPTION_MAX_LEN = 1000


def _to_utc(value: datetime | None) -> datetime | None:
    """Naive timestamps are taken as UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LEN)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LEN)
    due_date: datetime | None = Field(default=None, description="ISO 8601 due timestamp")
    status: TaskStatus = TaskStatus.PENDING
    category_id: int | None = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must be non-empty")
        return v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)


class TaskUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied;
    an explicit null clears description, due_date, or category_id.
    """

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LEN)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LEN)
    due_date: datetime | None = None
    status: TaskStatus | None = None
    category_id: int | None = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("title cannot be null")
        v = v.strip()
        if not v:
            raise ValueError("title must be non-empty")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: TaskStatus | None) -> TaskStatus | None:
        if v is None:
            raise ValueError("status cannot be null")
        return v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    due_date: datetime | None = None
    status: TaskStatus
    category_id: int | None = None
    category: CategoryRef | None = None
    created_at: datetime
    updated_at: datetime | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TaskListResponse(BaseModel):
    tasks: list[TaskOut]
    pagination: Pagination


class TaskStatsResponse(BaseModel):
    """Per-user counts; each is an independent point-in-time count."""

    model_config = ConfigDict(populate_by_name=True)

    total_tasks: int = Field(..., alias="totalTasks")
    pending_tasks: int = Field(..., alias="pendingTasks")
    in_progress_tasks: int = Field(..., alias="inProgressTasks")
    completed_tasks: int = Field(..., alias="completedTasks")
    overdue_tasks: int = Field(..., alias="overdueTasks")
