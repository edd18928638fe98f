"""Owner-scoped lookups shared by every category and task handler."""

from typing import TypeVar

from sqlalchemy.orm import Session

from taskmanager.core.errors import ConflictError, NotFoundError, ValidationError
from taskmanager.models import Category, Task

OwnedModel = TypeVar("OwnedModel", Category, Task)


def get_owned_or_404(
    db: Session,
    model: type[OwnedModel],
    resource_id: int,
    owner_id: int,
) -> OwnedModel:
    """
    Fetch a resource by id and owner in a single lookup.

    A resource owned by another user and a missing one both raise the same
    NotFoundError, so callers cannot probe for other users' ids.
    """
    resource = (
        db.query(model)
        .filter(model.id == resource_id, model.user_id == owner_id)
        .first()
    )
    if resource is None:
        raise NotFoundError(f"{model.__name__} not found")
    return resource


def require_owned_category(db: Session, category_id: int, owner_id: int) -> Category:
    """Resolve a category referenced by a task write; a foreign or missing one is a validation error."""
    category = (
        db.query(Category)
        .filter(Category.id == category_id, Category.user_id == owner_id)
        .first()
    )
    if category is None:
        raise ValidationError(
            "Category not found or does not belong to user",
            details=[{"field": "category_id", "message": "Unknown category"}],
        )
    return category


def ensure_category_name_available(
    db: Session,
    owner_id: int,
    name: str,
    exclude_id: int | None = None,
) -> None:
    """Raise ConflictError if the owner already has a category with this name."""
    query = db.query(Category.id).filter(
        Category.user_id == owner_id,
        Category.name == name,
    )
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first() is not None:
        raise ConflictError("Category with this name already exists")


def count_category_tasks(db: Session, category_id: int, owner_id: int) -> int:
    return (
        db.query(Task)
        .filter(Task.category_id == category_id, Task.user_id == owner_id)
        .count()
    )
