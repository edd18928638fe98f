"""
Seed a demo account with categories and tasks. Safe to re-run. Run from project root:

  python -m taskmanager.scripts.seed
"""

import logging
import sys
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmanager.core.database import SessionLocal
from taskmanager.core.logging_setup import configure_logging
from taskmanager.core.security import hash_password
from taskmanager.models import Category, Task, TaskStatus, User

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_NAME = "Demo"
DEMO_PASSWORD = "password123"

DEMO_CATEGORIES = (
    ("Work", "#3B82F6"),
    ("Personal", "#10B981"),
    ("Health", "#F59E0B"),
)

# (title, description, status, due in days or None, category name)
DEMO_TASKS = (
    (
        "Complete project documentation",
        "Write comprehensive documentation for the new API endpoints",
        TaskStatus.IN_PROGRESS,
        7,
        "Work",
    ),
    (
        "Review pull requests",
        "Review and provide feedback on pending pull requests",
        TaskStatus.PENDING,
        2,
        "Work",
    ),
    (
        "Buy groceries",
        "Get milk, bread, eggs, and vegetables for the week",
        TaskStatus.PENDING,
        1,
        "Personal",
    ),
    (
        "Plan weekend trip",
        "Research destinations and book accommodations",
        TaskStatus.COMPLETED,
        None,
        "Personal",
    ),
    ("Morning jog", "30-minute jog around the neighborhood", TaskStatus.COMPLETED, None, "Health"),
    ("Doctor appointment", "Annual health checkup", TaskStatus.PENDING, 14, "Health"),
)


def seed_demo_data(db: Session, now: datetime | None = None) -> User:
    """
    Create the demo user, its categories, and its tasks.

    Existing rows (matched by email, category name, or task title) are left
    untouched, so running twice does not duplicate anything.
    """
    now = now or datetime.now(UTC)
    user = db.query(User).filter(User.email == DEMO_EMAIL).first()
    if user is None:
        user = User(email=DEMO_EMAIL, name=DEMO_NAME, password_hash=hash_password(DEMO_PASSWORD))
        db.add(user)
        db.flush()

    categories: dict[str, Category] = {}
    for name, color in DEMO_CATEGORIES:
        category = (
            db.query(Category)
            .filter(Category.user_id == user.id, Category.name == name)
            .first()
        )
        if category is None:
            category = Category(name=name, color=color, user_id=user.id)
            db.add(category)
            db.flush()
        categories[name] = category

    for title, description, status, due_in_days, category_name in DEMO_TASKS:
        exists = (
            db.query(Task.id)
            .filter(Task.user_id == user.id, Task.title == title)
            .first()
        )
        if exists is not None:
            continue
        db.add(
            Task(
                title=title,
                description=description,
                status=status,
                due_date=now + timedelta(days=due_in_days) if due_in_days is not None else None,
                user_id=user.id,
                category_id=categories[category_name].id,
            )
        )
    db.commit()
    return user


def main() -> int:
    configure_logging()
    db = SessionLocal()
    try:
        user = seed_demo_data(db)
        logger.info("Seed completed: demo user id=%s email=%s", user.id, user.email)
        return 0
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
