"""Per-user task statistics."""

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from taskmanager.models import CLOSED_STATUSES, Task, TaskStatus


@dataclass(frozen=True)
class TaskStats:
    total: int
    pending: int
    in_progress: int
    completed: int
    overdue: int


def compute_task_stats(
    db: Session,
    owner_id: int,
    now: datetime | None = None,
) -> TaskStats:
    """
    Count the owner's tasks: total, per open/complete status, and overdue.

    Each count is its own query; the five numbers are not read in one
    transaction snapshot and may drift slightly under concurrent writes.
    Overdue means due strictly before now and not COMPLETED or CANCELLED.
    """
    now = now or datetime.now(UTC)
    owned = db.query(Task).filter(Task.user_id == owner_id)

    def _count_status(status: TaskStatus) -> int:
        return owned.filter(Task.status == status).count()

    overdue = owned.filter(
        Task.due_date.isnot(None),
        Task.due_date < now,
        Task.status.notin_(list(CLOSED_STATUSES)),
    ).count()

    return TaskStats(
        total=owned.count(),
        pending=_count_status(TaskStatus.PENDING),
        in_progress=_count_status(TaskStatus.IN_PROGRESS),
        completed=_count_status(TaskStatus.COMPLETED),
        overdue=overdue,
    )
