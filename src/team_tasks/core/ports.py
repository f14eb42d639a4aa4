# src/team_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The assignment engine, deadline monitor and service helpers depend on these
Protocols instead of concrete implementations, so the in-memory and SQLite
stores are interchangeable and tests can inject fakes.
"""

from typing import Protocol

from .models import Domain, Task, TaskPriority, TaskStatus, User, UserRole


class TeamStore(Protocol):
    # Users
    def get_user(self, user_id: int) -> User | None: ...
    def get_user_by_email(self, email: str) -> User | None: ...
    def create_user(
            self,
            *,
            name: str,
            email: str,
            password_hash: str,
            role: UserRole,
            preferred_domain: str | None = None,
    ) -> User: ...
    def update_user_domain(self, user_id: int, domain: str) -> User | None: ...
    def get_users_by_domain(self, domain: str) -> list[User]: ...
    def list_users(self) -> list[User]: ...
    def count_users(self) -> int: ...

    # Domains
    def list_domains(self) -> list[Domain]: ...
    def create_domain(self, *, name: str, description: str | None, created_by: int) -> Domain: ...
    def get_domain_by_name(self, name: str) -> Domain | None: ...

    # Tasks
    def list_tasks(self) -> list[Task]: ...
    def get_tasks_by_user(self, user_id: int) -> list[Task]: ...
    def get_tasks_by_domain(self, domain: str) -> list[Task]: ...
    def get_task(self, task_id: int) -> Task | None: ...
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
    ) -> Task: ...
    def update_task_status(
            self,
            task_id: int,
            status: TaskStatus,
            completed_at: float | None = None,
    ) -> Task | None: ...
    def update_task_assignment(self, task_id: int, user_id: int) -> Task | None: ...
    def get_overdue_tasks(self, *, now_ts: float | None = None) -> list[Task]: ...
    def count_tasks(self) -> int: ...

    def close(self) -> None: ...


class PasswordHasher(Protocol):
    """Credential collaborator: the hashing policy lives behind this port."""
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
