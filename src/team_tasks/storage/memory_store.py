# src/team_tasks/storage/memory_store.py

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace

from ..core.errors import ConflictError
from ..core.models import Domain, Task, TaskPriority, TaskStatus, User, UserRole

logger = logging.getLogger(__name__)


def _newest_first(tasks: list[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: (t.created_at, t.id), reverse=True)


class MemoryTeamStore:
    """
    Dict-backed TeamStore.

    Maps preserve insertion order, so listings come back in id order.
    Stored objects are never mutated in place: updates swap in a copy, so
    callers holding an older snapshot are unaffected.

    Thread-safety:
    - every public method runs under one re-entrant lock
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._domains: dict[int, Domain] = {}
        self._tasks: dict[int, Task] = {}
        self._next_user_id = 1
        self._next_domain_id = 1
        self._next_task_id = 1
        logger.info("MemoryTeamStore ready")

    def close(self) -> None:
        """Nothing to release; kept for the TeamStore contract."""
        return

    # ---- users ----

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(int(user_id))

    def get_user_by_email(self, email: str) -> User | None:
        key = (email or "").strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email == key:
                    return user
            return None

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        preferred_domain: str | None = None,
    ) -> User:
        key = email.strip().lower()
        with self._lock:
            if any(u.email == key for u in self._users.values()):
                raise ConflictError("User already exists", error_code="user_exists")

            user = User(
                id=self._next_user_id,
                name=name.strip(),
                email=key,
                password_hash=password_hash,
                role=role,
                preferred_domain=preferred_domain,
            )
            self._next_user_id += 1
            self._users[user.id] = user
            logger.debug("User added id=%s role=%s domain=%s", user.id, role.value, preferred_domain)
            return user

    def update_user_domain(self, user_id: int, domain: str) -> User | None:
        with self._lock:
            user = self._users.get(int(user_id))
            if user is None:
                return None
            updated = replace(user, preferred_domain=domain)
            self._users[updated.id] = updated
            return updated

    def get_users_by_domain(self, domain: str) -> list[User]:
        with self._lock:
            return [u for u in self._users.values() if u.preferred_domain == domain]

    def list_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    def count_users(self) -> int:
        with self._lock:
            return len(self._users)

    # ---- domains ----

    def list_domains(self) -> list[Domain]:
        with self._lock:
            return list(self._domains.values())

    def create_domain(self, *, name: str, description: str | None, created_by: int) -> Domain:
        clean = name.strip()
        with self._lock:
            if any(d.name == clean for d in self._domains.values()):
                raise ConflictError(f"Domain {clean!r} already exists", error_code="domain_exists")

            domain = Domain(
                id=self._next_domain_id,
                name=clean,
                description=description,
                created_by=int(created_by),
            )
            self._next_domain_id += 1
            self._domains[domain.id] = domain
            return domain

    def get_domain_by_name(self, name: str) -> Domain | None:
        with self._lock:
            for domain in self._domains.values():
                if domain.name == name:
                    return domain
            return None

    # ---- tasks ----

    def list_tasks(self) -> list[Task]:
        with self._lock:
            return _newest_first(list(self._tasks.values()))

    def get_tasks_by_user(self, user_id: int) -> list[Task]:
        with self._lock:
            return _newest_first([t for t in self._tasks.values() if t.assigned_to == int(user_id)])

    def get_tasks_by_domain(self, domain: str) -> list[Task]:
        with self._lock:
            return _newest_first([t for t in self._tasks.values() if t.domain == domain])

    def get_task(self, task_id: int) -> Task | None:
        with self._lock:
            return self._tasks.get(int(task_id))

    def create_task(
        self,
        *,
        title: str,
        domain: str,
        deadline_at: float,
        created_by: int,
        description: str | None = None,
        assigned_to: int | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Task:
        now = time.time()
        with self._lock:
            task = Task(
                id=self._next_task_id,
                title=title.strip(),
                description=description,
                domain=domain,
                assigned_to=assigned_to,
                deadline_at=float(deadline_at),
                status=status,
                priority=priority,
                created_by=int(created_by),
                created_at=now,
                completed_at=now if status == TaskStatus.COMPLETED else None,
            )
            self._next_task_id += 1
            self._tasks[task.id] = task
            logger.debug(
                "Task added id=%s domain=%s assigned_to=%s deadline_at=%s",
                task.id,
                domain,
                assigned_to,
                deadline_at,
            )
            return task

    def update_task_status(
        self,
        task_id: int,
        status: TaskStatus,
        completed_at: float | None = None,
    ) -> Task | None:
        with self._lock:
            task = self._tasks.get(int(task_id))
            if task is None:
                return None

            if status == TaskStatus.COMPLETED:
                done_at = completed_at if completed_at is not None else time.time()
            else:
                done_at = None

            updated = replace(task, status=status, completed_at=done_at)
            self._tasks[updated.id] = updated
            return updated

    def update_task_assignment(self, task_id: int, user_id: int) -> Task | None:
        with self._lock:
            task = self._tasks.get(int(task_id))
            if task is None:
                return None
            updated = replace(task, assigned_to=int(user_id))
            self._tasks[updated.id] = updated
            return updated

    def get_overdue_tasks(self, *, now_ts: float | None = None) -> list[Task]:
        if now_ts is None:
            now_ts = time.time()
        with self._lock:
            overdue = [t for t in self._tasks.values() if t.is_overdue(now_ts)]
        return sorted(overdue, key=lambda t: (t.deadline_at, t.id))

    def count_tasks(self) -> int:
        with self._lock:
            return len(self._tasks)
