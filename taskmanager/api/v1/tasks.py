"""Task endpoints: CRUD, filtered listing, and per-user statistics."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskmanager.api.v1.auth import get_current_user
from taskmanager.core.database import get_db
from taskmanager.models import Task, TaskStatus
from taskmanager.schemas.auth import CurrentUser
from taskmanager.schemas.common import MessageResponse
from taskmanager.schemas.task import (
    Pagination,
    TaskCreate,
    TaskListResponse,
    TaskOut,
    TaskStatsResponse,
    TaskUpdate,
)
from taskmanager.services.ownership import get_owned_or_404, require_owned_category
from taskmanager.services.stats import compute_task_stats
from taskmanager.services.task_query import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    MAX_PAGE,
    SEARCH_MAX_LEN,
    SortOrder,
    TaskQuery,
    TaskSortField,
    run_task_query,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stats", response_model=TaskStatsResponse)
def get_task_stats(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TaskStatsResponse:
    """Return total, pending, in-progress, completed, and overdue task counts for the current user."""
    stats = compute_task_stats(db, user.id)
    return TaskStatsResponse(
        total_tasks=stats.total,
        pending_tasks=stats.pending,
        in_progress_tasks=stats.in_progress,
        completed_tasks=stats.completed,
        overdue_tasks=stats.overdue,
    )


@router.get("", response_model=TaskListResponse)
def list_tasks(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1, le=MAX_PAGE)] = DEFAULT_PAGE,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
    task_status: Annotated[TaskStatus | None, Query(alias="status")] = None,
    category_id: Annotated[int | None, Query(alias="categoryId", ge=1)] = None,
    search: Annotated[str | None, Query(max_length=SEARCH_MAX_LEN)] = None,
    sort_by: Annotated[TaskSortField, Query(alias="sortBy")] = TaskSortField.CREATED_AT,
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = SortOrder.DESC,
) -> TaskListResponse:
    """
    List the current user's tasks.

    Filters: status, categoryId, search (case-insensitive, title or description).
    Sorting: sortBy in createdAt|dueDate|title|status, sortOrder asc|desc.
    Pagination: page (from 1) and limit; the response carries total and page count.
    """
    query = TaskQuery(
        owner_id=user.id,
        page=page,
        limit=limit,
        status=task_status,
        category_id=category_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = run_task_query(db, query)
    return TaskListResponse(
        tasks=[TaskOut.model_validate(t) for t in result.items],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
    )


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TaskOut:
    task = get_owned_or_404(db, Task, task_id, user.id)
    return TaskOut.model_validate(task)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TaskOut:
    """Create a task; category_id, if given, must name one of the user's categories."""
    if body.category_id is not None:
        require_owned_category(db, body.category_id, user.id)
    task = Task(
        title=body.title,
        description=body.description,
        due_date=body.due_date,
        status=body.status,
        category_id=body.category_id,
        user_id=user.id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task id=%s for user id=%s", task.id, user.id)
    return TaskOut.model_validate(task)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    body: TaskUpdate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TaskOut:
    """Apply the fields present in the body. An explicit null category_id removes the category."""
    task = get_owned_or_404(db, Task, task_id, user.id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None:
        require_owned_category(db, changes["category_id"], user.id)
    for attr, value in changes.items():
        setattr(task, attr, value)
    db.commit()
    db.refresh(task)
    return TaskOut.model_validate(task)


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    task = get_owned_or_404(db, Task, task_id, user.id)
    db.delete(task)
    db.commit()
    logger.info("Deleted task id=%s for user id=%s", task_id, user.id)
    return MessageResponse(message="Task deleted successfully")
