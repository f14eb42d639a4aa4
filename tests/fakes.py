# tests/fakes.py

from __future__ import annotations

import time
from typing import Any

from team_tasks.core.models import Task, TaskPriority, TaskStatus, User, UserRole


class FakePasswordHasher:
    """
    Deterministic PasswordHasher for unit tests (bcrypt is slow on purpose).
    """

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password cannot be empty")
        return f"fake${password}"

    def verify(self, password: str, hashed: str) -> bool:
        return bool(password) and hashed == f"fake${password}"


class FlakyStore:
    """
    Wraps a real store and injects failures.

    - fail_assignment_for: task ids whose update_task_assignment raises
    - fail_overdue_query: make get_overdue_tasks raise
    - vanish_on_assignment: task ids whose update_task_assignment returns None
    """

    def __init__(
        self,
        inner: Any,
        *,
        fail_assignment_for: set[int] | None = None,
        fail_overdue_query: bool = False,
        vanish_on_assignment: set[int] | None = None,
    ) -> None:
        self.inner = inner
        self.fail_assignment_for = fail_assignment_for or set()
        self.fail_overdue_query = fail_overdue_query
        self.vanish_on_assignment = vanish_on_assignment or set()
        self.assignment_calls: list[tuple[int, int]] = []

    def __getattr__(self, name: str) -> Any:
        return getattr(self.inner, name)

    def get_overdue_tasks(self, *, now_ts: float | None = None) -> list[Task]:
        if self.fail_overdue_query:
            raise RuntimeError("database is down")
        return self.inner.get_overdue_tasks(now_ts=now_ts)

    def update_task_assignment(self, task_id: int, user_id: int) -> Task | None:
        self.assignment_calls.append((task_id, user_id))
        if task_id in self.fail_assignment_for:
            raise RuntimeError(f"write failed for task {task_id}")
        if task_id in self.vanish_on_assignment:
            return None
        return self.inner.update_task_assignment(task_id, user_id)


class SlowStore(FlakyStore):
    """Overdue query that takes `delay` seconds (to make a sweep overrun its interval)."""

    def __init__(self, inner: Any, *, delay: float) -> None:
        super().__init__(inner)
        self.delay = delay
        self.sweeps = 0

    def get_overdue_tasks(self, *, now_ts: float | None = None) -> list[Task]:
        self.sweeps += 1
        time.sleep(self.delay)
        return self.inner.get_overdue_tasks(now_ts=now_ts)


def add_user(
    store: Any,
    name: str,
    *,
    role: UserRole = UserRole.MEMBER,
    domain: str | None = None,
) -> User:
    return store.create_user(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        password_hash=f"fake${name}",
        role=role,
        preferred_domain=domain,
    )


def add_task(
    store: Any,
    domain: str,
    *,
    assigned_to: int | None,
    created_by: int = 1,
    deadline_at: float | None = None,
    status: TaskStatus = TaskStatus.PENDING,
    title: str = "task",
    priority: TaskPriority = TaskPriority.MEDIUM,
) -> Task:
    if deadline_at is None:
        deadline_at = time.time() + 3600
    return store.create_task(
        title=title,
        domain=domain,
        deadline_at=deadline_at,
        created_by=created_by,
        assigned_to=assigned_to,
        priority=priority,
        status=status,
    )
