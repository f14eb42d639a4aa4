# src/team_tasks/core/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class UserRole(StrEnum):
    LEAD = "lead"
    MEMBER = "member"

    @classmethod
    def parse(cls, raw: str | None) -> UserRole | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    A task only leaves PENDING through an explicit status update; reassignment
    by the deadline monitor never touches the status.
    """

    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM

    @classmethod
    def parse(cls, raw: str | None) -> TaskPriority | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(slots=True)
class User:
    id: int
    name: str
    email: str
    password_hash: str
    role: UserRole
    preferred_domain: str | None = None

    @property
    def is_lead(self) -> bool:
        return self.role == UserRole.LEAD

    def public_dict(self) -> dict[str, Any]:
        """User fields safe to show (no password hash)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "preferred_domain": self.preferred_domain,
        }


@dataclass(slots=True)
class Domain:
    id: int
    name: str
    description: str | None
    created_by: int


@dataclass(slots=True)
class Task:
    id: int
    title: str
    description: str | None
    domain: str
    assigned_to: int | None
    deadline_at: float
    status: TaskStatus
    priority: TaskPriority
    created_by: int
    created_at: float
    completed_at: float | None = None

    def is_overdue(self, now_ts: float) -> bool:
        return self.status == TaskStatus.PENDING and self.deadline_at < now_ts
