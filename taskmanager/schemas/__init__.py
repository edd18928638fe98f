"""Pydantic request/response schemas."""

from taskmanager.schemas.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserOut,
)
from taskmanager.schemas.category import (
    CategoriesResponse,
    CategoryCreate,
    CategoryDetail,
    CategoryOut,
    CategoryRef,
    CategoryUpdate,
)
from taskmanager.schemas.common import MessageResponse
from taskmanager.schemas.health import HealthResponse
from taskmanager.schemas.task import (
    Pagination,
    TaskCreate,
    TaskListResponse,
    TaskOut,
    TaskStatsResponse,
    TaskUpdate,
)

__all__ = [
    "AuthResponse",
    "CategoriesResponse",
    "CategoryCreate",
    "CategoryDetail",
    "CategoryOut",
    "CategoryRef",
    "CategoryUpdate",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "Pagination",
    "RefreshRequest",
    "RegisterRequest",
    "TaskCreate",
    "TaskListResponse",
    "TaskOut",
    "TaskStatsResponse",
    "TaskUpdate",
    "TokenResponse",
    "UserOut",
]
