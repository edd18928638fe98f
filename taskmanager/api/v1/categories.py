"""Category endpoints. Every lookup is scoped to the authenticated owner."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskmanager.api.v1.auth import get_current_user
from taskmanager.core.database import get_db
from taskmanager.core.errors import ConflictError
from taskmanager.models import Category, Task
from taskmanager.schemas.auth import CurrentUser
from taskmanager.schemas.category import (
    CategoriesResponse,
    CategoryCreate,
    CategoryDetail,
    CategoryOut,
    CategoryTaskItem,
    CategoryUpdate,
)
from taskmanager.schemas.common import MessageResponse
from taskmanager.services.ownership import (
    count_category_tasks,
    ensure_category_name_available,
    get_owned_or_404,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_NAME_MESSAGE = "Category with this name already exists"


def _category_out(category: Category, task_count: int) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        color=category.color,
        task_count=task_count,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def _commit_category(db: Session, category: Category) -> None:
    """Commit, mapping a (user_id, name) unique violation to ConflictError."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_NAME_MESSAGE)
    db.refresh(category)


@router.get("", response_model=CategoriesResponse)
def list_categories(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CategoriesResponse:
    """Return the user's categories with task counts, newest first."""
    rows = (
        db.query(Category, func.count(Task.id))
        .outerjoin(Task, Task.category_id == Category.id)
        .filter(Category.user_id == user.id)
        .group_by(Category.id)
        .order_by(Category.created_at.desc(), Category.id.desc())
        .all()
    )
    return CategoriesResponse(
        categories=[_category_out(category, count) for category, count in rows]
    )


@router.get("/{category_id}", response_model=CategoryDetail)
def get_category(
    category_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CategoryDetail:
    """Return one category with its tasks (newest first)."""
    category = get_owned_or_404(db, Category, category_id, user.id)
    tasks = (
        db.query(Task)
        .filter(Task.category_id == category.id, Task.user_id == user.id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )
    base = _category_out(category, len(tasks))
    return CategoryDetail(
        **base.model_dump(),
        tasks=[CategoryTaskItem.model_validate(t) for t in tasks],
    )


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CategoryOut:
    """Create a category. Names are unique per user."""
    ensure_category_name_available(db, user.id, body.name)
    category = Category(name=body.name, color=body.color, user_id=user.id)
    db.add(category)
    _commit_category(db, category)
    logger.info("Created category id=%s for user id=%s", category.id, user.id)
    return _category_out(category, 0)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CategoryOut:
    """Rename and/or recolor a category. Omitted fields are unchanged."""
    category = get_owned_or_404(db, Category, category_id, user.id)
    if body.name is not None and body.name != category.name:
        ensure_category_name_available(db, user.id, body.name, exclude_id=category.id)
        category.name = body.name
    if body.color is not None:
        category.color = body.color
    _commit_category(db, category)
    return _category_out(category, count_category_tasks(db, category.id, user.id))


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a category. Refused while any task still references it."""
    category = get_owned_or_404(db, Category, category_id, user.id)
    task_count = count_category_tasks(db, category.id, user.id)
    if task_count > 0:
        raise ConflictError(
            f"Cannot delete category. It has {task_count} associated tasks. "
            "Please move or delete the tasks first."
        )
    db.delete(category)
    db.commit()
    logger.info("Deleted category id=%s for user id=%s", category_id, user.id)
    return MessageResponse(message="Category deleted successfully")
