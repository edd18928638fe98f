"""Shared fixtures for DB-backed and API tests: in-memory SQLite and a wired TestClient."""

import unittest
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskmanager.core.database import get_db
from taskmanager.main import app
from taskmanager.models import Base, Category, Task, TaskStatus, User

API = "/api/v1"

# Minimum bcrypt cost keeps the suite fast; production uses BCRYPT_ROUNDS.
FAST_BCRYPT_ROUNDS = 4


def make_engine() -> Engine:
    """Fresh in-memory SQLite database with all tables, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


class DbTestCase(unittest.TestCase):
    """Gives each test its own empty database and a session on it."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db: Session = self.session_factory()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def make_user(self, email: str = "ada@example.com", name: str = "Ada") -> User:
        user = User(email=email, name=name, password_hash="not-a-real-hash")
        self.db.add(user)
        self.db.commit()
        return user

    def make_category(self, owner: User, name: str = "Work", color: str = "#3B82F6") -> Category:
        category = Category(name=name, color=color, user_id=owner.id)
        self.db.add(category)
        self.db.commit()
        return category

    def make_task(
        self,
        owner: User,
        title: str = "Task",
        status: TaskStatus = TaskStatus.PENDING,
        **kwargs: Any,
    ) -> Task:
        task = Task(title=title, status=status, user_id=owner.id, **kwargs)
        self.db.add(task)
        self.db.commit()
        return task


class ApiTestCase(DbTestCase):
    """DbTestCase plus a TestClient whose get_db dependency points at the test database."""

    def setUp(self) -> None:
        super().setUp()

        def override_get_db():
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        rounds = patch("taskmanager.core.security.BCRYPT_ROUNDS", FAST_BCRYPT_ROUNDS)
        rounds.start()
        self.addCleanup(rounds.stop)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.pop(get_db, None)
        self.client.close()
        super().tearDown()

    def register(
        self,
        email: str = "ada@example.com",
        password: str = "s3cret-pass",
        name: str = "Ada",
    ) -> dict[str, Any]:
        resp = self.client.post(
            f"{API}/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def auth_headers(self, email: str = "ada@example.com", name: str = "Ada") -> dict[str, str]:
        """Register a user and return Authorization headers for it."""
        body = self.register(email=email, name=name)
        return {"Authorization": f"Bearer {body['access_token']}"}


def utc(minutes: int = 0) -> datetime:
    """Fixed base instant shifted by minutes; keeps ordering tests deterministic."""
    return datetime(2025, 1, 1, 12, 0, tzinfo=UTC) + timedelta(minutes=minutes)
