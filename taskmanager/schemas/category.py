"""Pydantic schemas for categories."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskmanager.models.category import DEFAULT_CATEGORY_COLOR
from taskmanager.models.task import TaskStatus

CATEGORY_NAME_MAX_LEN = 50

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _validate_name(value: str) -> str:
    """Trim and require a non-empty name."""
    value = value.strip()
    if not value:
        raise ValueError("name must be non-empty")
    return value


def _validate_color(value: str) -> str:
    """Ensure color is a #RRGGBB hex string; stored upper-case."""
    if not _HEX_COLOR.match(value):
        raise ValueError("color must be a hex color like #3B82F6")
    return value.upper()


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=CATEGORY_NAME_MAX_LEN)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, description="Hex color #RRGGBB")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _validate_color(v)


class CategoryUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=CATEGORY_NAME_MAX_LEN)
    color: str | None = Field(default=None, description="Hex color #RRGGBB")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else _validate_name(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        return None if v is None else _validate_color(v)


class CategoryRef(BaseModel):
    """Category summary embedded in task responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    task_count: int = Field(default=0, description="Number of tasks in this category")
    created_at: datetime
    updated_at: datetime | None = None


class CategoryTaskItem(BaseModel):
    """Task summary listed under a category."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: TaskStatus
    due_date: datetime | None = None
    created_at: datetime


class CategoryDetail(CategoryOut):
    tasks: list[CategoryTaskItem] = Field(default_factory=list)


class CategoriesResponse(BaseModel):
    categories: list[CategoryOut]
