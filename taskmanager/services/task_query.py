"""Typed filter/sort/paginate descriptor over one user's tasks."""

import enum
import logging
import math
from dataclasses import dataclass, field

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, joinedload

from taskmanager.models import Task, TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Keeps (page - 1) * limit far below the database OFFSET range.
MAX_PAGE = 1_000_000
SEARCH_MAX_LEN = 200


class TaskSortField(str, enum.Enum):
    """Sortable task attributes (API names). Anything else is rejected."""

    CREATED_AT = "createdAt"
    DUE_DATE = "dueDate"
    TITLE = "title"
    STATUS = "status"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


_SORT_COLUMNS = {
    TaskSortField.CREATED_AT: Task.created_at,
    TaskSortField.DUE_DATE: Task.due_date,
    TaskSortField.TITLE: Task.title,
    TaskSortField.STATUS: Task.status,
}


@dataclass(frozen=True)
class TaskQuery:
    """Validated task listing request. owner_id is mandatory and always applied."""

    owner_id: int
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status: TaskStatus | None = None
    category_id: int | None = None
    search: str | None = None
    sort_by: TaskSortField = TaskSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        if not 1 <= self.page <= MAX_PAGE:
            raise ValueError(f"page must be between 1 and {MAX_PAGE}")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")
        # Coerce raw strings so unknown values fail here rather than reaching SQL.
        object.__setattr__(self, "sort_by", TaskSortField(self.sort_by))
        object.__setattr__(self, "sort_order", SortOrder(self.sort_order))
        if self.status is not None:
            object.__setattr__(self, "status", TaskStatus(self.status))
        if self.search is not None:
            term = self.search.strip()
            object.__setattr__(self, "search", term or None)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class TaskPage:
    items: list[Task] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_filtered_query(db: Session, query: TaskQuery) -> Query:
    """Owner-scoped task query with the optional status/category/search predicates applied."""
    q = db.query(Task).filter(Task.user_id == query.owner_id)
    if query.status is not None:
        q = q.filter(Task.status == query.status)
    if query.category_id is not None:
        q = q.filter(Task.category_id == query.category_id)
    if query.search:
        pattern = f"%{_escape_like(query.search)}%"
        q = q.filter(
            or_(
                Task.title.ilike(pattern, escape="\\"),
                Task.description.ilike(pattern, escape="\\"),
            )
        )
    return q


def run_task_query(db: Session, query: TaskQuery) -> TaskPage:
    """
    Return one page of the owner's tasks plus the total match count.

    The total is counted over the filtered set independently of the page window.
    Ties on the sort column are broken by id in the same direction so paging is stable.
    """
    filtered = build_filtered_query(db, query)
    total = filtered.order_by(None).count()

    column = _SORT_COLUMNS[query.sort_by]
    if query.sort_order is SortOrder.ASC:
        ordering = (column.asc(), Task.id.asc())
    else:
        ordering = (column.desc(), Task.id.desc())

    items = (
        filtered.options(joinedload(Task.category))
        .order_by(*ordering)
        .offset(query.offset)
        .limit(query.limit)
        .all()
    )
    logger.debug(
        "Task query owner=%s page=%s limit=%s total=%s",
        query.owner_id,
        query.page,
        query.limit,
        total,
    )
    return TaskPage(items=items, total=total, page=query.page, limit=query.limit)
