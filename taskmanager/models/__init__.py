"""SQLAlchemy ORM models."""

from taskmanager.models.base import Base
from taskmanager.models.category import DEFAULT_CATEGORY_COLOR, Category
from taskmanager.models.task import CLOSED_STATUSES, Task, TaskStatus
from taskmanager.models.user import User

__all__ = [
    "Base",
    "CLOSED_STATUSES",
    "Category",
    "DEFAULT_CATEGORY_COLOR",
    "Task",
    "TaskStatus",
    "User",
]
