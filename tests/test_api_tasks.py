"""API tests for task endpoints: CRUD, owner isolation, listing, and stats."""

import unittest
from datetime import UTC, datetime, timedelta

from support import API, ApiTestCase, utc

from taskmanager.models import Task, TaskStatus, User
from taskmanager.services.task_query import MAX_PAGE


class TaskApiTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice = self.auth_headers("alice@example.com", "Alice")
        self.bob = self.auth_headers("bob@example.com", "Bob")

    def create_task(self, headers: dict[str, str], **body: object):
        body.setdefault("title", "Task")
        return self.client.post(f"{API}/tasks", json=body, headers=headers)

    def user_id(self, email: str) -> int:
        return self.db.query(User.id).filter(User.email == email).scalar()


class TestTaskCrud(TaskApiTestCase):
    def test_create_defaults_to_pending(self) -> None:
        resp = self.create_task(self.alice, title="Write tests")
        self.assertEqual(resp.status_code, 201, resp.text)
        body = resp.json()
        self.assertEqual(body["status"], "PENDING")
        self.assertIsNone(body["category"])

    def test_create_with_own_category_embeds_it(self) -> None:
        work = self.client.post(
            f"{API}/categories", json={"name": "Work"}, headers=self.alice
        ).json()
        resp = self.create_task(self.alice, title="Report", category_id=work["id"])
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["category"], {"id": work["id"], "name": "Work", "color": "#3B82F6"})

    def test_create_with_foreign_category_is_validation_error(self) -> None:
        bobs = self.client.post(f"{API}/categories", json={"name": "Bob's"}, headers=self.bob).json()
        resp = self.create_task(self.alice, title="Sneaky", category_id=bobs["id"])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation_error")

    def test_invalid_status_rejected(self) -> None:
        resp = self.create_task(self.alice, status="DONE")
        self.assertEqual(resp.status_code, 400)

    def test_partial_update(self) -> None:
        task = self.create_task(self.alice, title="Draft", description="keep me").json()
        resp = self.client.put(
            f"{API}/tasks/{task['id']}", json={"status": "IN_PROGRESS"}, headers=self.alice
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["status"], "IN_PROGRESS")
        self.assertEqual(body["title"], "Draft")
        self.assertEqual(body["description"], "keep me")

    def test_update_rejects_null_title(self) -> None:
        task = self.create_task(self.alice).json()
        resp = self.client.put(f"{API}/tasks/{task['id']}", json={"title": None}, headers=self.alice)
        self.assertEqual(resp.status_code, 400)

    def test_update_to_foreign_category_rejected(self) -> None:
        task = self.create_task(self.alice).json()
        bobs = self.client.post(f"{API}/categories", json={"name": "B"}, headers=self.bob).json()
        resp = self.client.put(
            f"{API}/tasks/{task['id']}", json={"category_id": bobs["id"]}, headers=self.alice
        )
        self.assertEqual(resp.status_code, 400)

    def test_delete(self) -> None:
        task = self.create_task(self.alice).json()
        resp = self.client.delete(f"{API}/tasks/{task['id']}", headers=self.alice)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            self.client.get(f"{API}/tasks/{task['id']}", headers=self.alice).status_code, 404
        )


class TestTaskIsolation(TaskApiTestCase):
    def test_other_user_sees_not_found(self) -> None:
        task = self.create_task(self.alice, title="Private").json()
        url = f"{API}/tasks/{task['id']}"
        missing = self.client.get(f"{API}/tasks/999999", headers=self.bob).json()
        for resp in (
            self.client.get(url, headers=self.bob),
            self.client.put(url, json={"title": "Hijacked"}, headers=self.bob),
            self.client.delete(url, headers=self.bob),
        ):
            self.assertEqual(resp.status_code, 404)
            self.assertEqual(resp.json(), missing)
        self.assertEqual(self.client.get(url, headers=self.alice).json()["title"], "Private")

    def test_other_user_list_excludes_task(self) -> None:
        self.create_task(self.alice, title="Private")
        body = self.client.get(f"{API}/tasks", headers=self.bob).json()
        self.assertEqual(body["tasks"], [])
        self.assertEqual(body["pagination"]["total"], 0)


class TestTaskListing(TaskApiTestCase):
    def _seed(self, count: int) -> None:
        owner_id = self.user_id("alice@example.com")
        statuses = list(TaskStatus)
        for i in range(1, count + 1):
            self.db.add(
                Task(
                    title=f"Task {i}",
                    status=statuses[i % len(statuses)],
                    user_id=owner_id,
                    created_at=utc(i),
                )
            )
        self.db.commit()

    def test_second_page_of_25(self) -> None:
        self._seed(25)
        resp = self.client.get(f"{API}/tasks", params={"page": 2, "limit": 10}, headers=self.alice)
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["pagination"], {"page": 2, "limit": 10, "total": 25, "pages": 3})
        self.assertEqual(
            [t["title"] for t in body["tasks"]], [f"Task {i}" for i in range(15, 5, -1)]
        )

    def test_defaults(self) -> None:
        self._seed(12)
        body = self.client.get(f"{API}/tasks", headers=self.alice).json()
        self.assertEqual(body["pagination"], {"page": 1, "limit": 10, "total": 12, "pages": 2})
        self.assertEqual(body["tasks"][0]["title"], "Task 12")

    def test_search(self) -> None:
        self.create_task(self.alice, title="Buy milk")
        self.create_task(self.alice, title="Walk dog", description="around the park")
        body = self.client.get(f"{API}/tasks", params={"search": "MILK"}, headers=self.alice).json()
        self.assertEqual([t["title"] for t in body["tasks"]], ["Buy milk"])

    def test_status_and_sort_params(self) -> None:
        self.create_task(self.alice, title="b", status="COMPLETED")
        self.create_task(self.alice, title="a", status="COMPLETED")
        self.create_task(self.alice, title="c", status="PENDING")
        body = self.client.get(
            f"{API}/tasks",
            params={"status": "COMPLETED", "sortBy": "title", "sortOrder": "asc"},
            headers=self.alice,
        ).json()
        self.assertEqual([t["title"] for t in body["tasks"]], ["a", "b"])

    def test_category_filter_param(self) -> None:
        work = self.client.post(f"{API}/categories", json={"name": "Work"}, headers=self.alice).json()
        self.create_task(self.alice, title="in", category_id=work["id"])
        self.create_task(self.alice, title="out")
        body = self.client.get(
            f"{API}/tasks", params={"categoryId": work["id"]}, headers=self.alice
        ).json()
        self.assertEqual([t["title"] for t in body["tasks"]], ["in"])

    def test_invalid_parameters_rejected(self) -> None:
        for params in (
            {"sortBy": "password_hash"},
            {"sortOrder": "up"},
            {"status": "DONE"},
            {"page": 0},
            {"page": MAX_PAGE + 1},
            {"page": 10**20},
            {"limit": 0},
        ):
            resp = self.client.get(f"{API}/tasks", params=params, headers=self.alice)
            self.assertEqual(resp.status_code, 400, params)
            self.assertEqual(resp.json()["kind"], "validation_error")

    def test_last_allowed_page_is_empty(self) -> None:
        self.create_task(self.alice)
        resp = self.client.get(
            f"{API}/tasks", params={"page": MAX_PAGE, "limit": 100}, headers=self.alice
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["tasks"], [])
        self.assertEqual(resp.json()["pagination"]["total"], 1)

    def test_requires_authentication(self) -> None:
        self.assertEqual(self.client.get(f"{API}/tasks").status_code, 401)


class TestTaskStats(TaskApiTestCase):
    def test_stats(self) -> None:
        past = (datetime.now(UTC) - timedelta(days=1)).isoformat()
        future = (datetime.now(UTC) + timedelta(days=1)).isoformat()
        self.create_task(self.alice, status="PENDING", due_date=past)
        self.create_task(self.alice, status="IN_PROGRESS", due_date=past)
        self.create_task(self.alice, status="COMPLETED", due_date=past)
        self.create_task(self.alice, status="CANCELLED", due_date=past)
        self.create_task(self.alice, status="PENDING", due_date=future)
        self.create_task(self.bob, status="PENDING", due_date=past)

        resp = self.client.get(f"{API}/tasks/stats", headers=self.alice)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(
            resp.json(),
            {
                "totalTasks": 5,
                "pendingTasks": 2,
                "inProgressTasks": 1,
                "completedTasks": 1,
                "overdueTasks": 2,
            },
        )

    def test_completing_overdue_task_clears_it(self) -> None:
        past = (datetime.now(UTC) - timedelta(days=1)).isoformat()
        task = self.create_task(self.alice, status="PENDING", due_date=past).json()
        stats = self.client.get(f"{API}/tasks/stats", headers=self.alice).json()
        self.assertEqual(stats["overdueTasks"], 1)
        self.client.put(f"{API}/tasks/{task['id']}", json={"status": "COMPLETED"}, headers=self.alice)
        stats = self.client.get(f"{API}/tasks/stats", headers=self.alice).json()
        self.assertEqual(stats["overdueTasks"], 0)


if __name__ == "__main__":
    unittest.main()
