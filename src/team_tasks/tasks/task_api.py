# src/team_tasks/tasks/task_api.py

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

from ..core.errors import NotFoundError, PermissionDeniedError, ValidationError
from ..core.models import Task, TaskPriority, TaskStatus, User
from ..core.state import AppState
from ..teams.team_api import require_lead
from .assignment import select_assignee
from .deadline_monitor import SweepReport, sweep_overdue_tasks

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    in_progress: int
    overdue: int


def create_task(
    state: AppState,
    actor: User,
    *,
    title: str,
    domain: str,
    deadline_at: float,
    description: str | None = None,
    priority: str | TaskPriority = TaskPriority.MEDIUM,
) -> Task:
    """
    Create a task and auto-assign it to the least-loaded member of its domain.

    Leads only. If nobody prefers the domain the task is stored unassigned.
    Storage errors propagate to the caller.
    """
    require_lead(actor)

    title = (title or "").strip()
    domain = (domain or "").strip()
    if not title:
        raise ValidationError("title is required")
    if not domain:
        raise ValidationError("domain is required")

    parsed_priority = priority if isinstance(priority, TaskPriority) else TaskPriority.parse(priority)
    if parsed_priority is None:
        raise ValidationError("priority must be one of: low, medium, high, urgent")

    try:
        deadline = float(deadline_at)
    except (TypeError, ValueError) as e:
        raise ValidationError("deadline must be a timestamp") from e
    if not math.isfinite(deadline):
        raise ValidationError("deadline must be a finite timestamp")

    assigned_to = select_assignee(state.store, domain)

    task = state.store.create_task(
        title=title,
        domain=domain,
        deadline_at=deadline,
        created_by=actor.id,
        description=(description or "").strip() or None,
        assigned_to=assigned_to,
        priority=parsed_priority,
    )
    if assigned_to is None:
        logger.info("Task %s created in domain %r without assignee (no domain users)", task.id, domain)
    else:
        logger.info("Task %s created in domain %r, assigned to user %s", task.id, domain, assigned_to)
    return task


def update_task_status(
    state: AppState,
    actor: User,
    task_id: int,
    status: str | TaskStatus,
) -> Task:
    """Members may only update tasks assigned to them; leads may update any task."""
    parsed = status if isinstance(status, TaskStatus) else TaskStatus.parse(status)
    if parsed is None:
        raise ValidationError("status must be 'pending' or 'completed'")

    task = state.store.get_task(task_id)
    if task is None:
        raise NotFoundError("Task not found", error_code="task_not_found")

    if not actor.is_lead and task.assigned_to != actor.id:
        raise PermissionDeniedError("Not authorized to update this task", error_code="not_assignee")

    updated = state.store.update_task_status(task_id, parsed)
    if updated is None:
        raise NotFoundError("Task not found", error_code="task_not_found")

    logger.info("Task %s -> %s (by user %s)", task_id, parsed.value, actor.id)
    return updated


def list_tasks(
    state: AppState,
    actor: User,
    *,
    user_id: int | None = None,
    domain: str | None = None,
) -> list[Task]:
    """
    Explicit filters win (user first, then domain).
    Without filters leads see all tasks and members only their own.
    """
    if user_id is not None:
        return state.store.get_tasks_by_user(user_id)
    if domain:
        return state.store.get_tasks_by_domain(domain)
    if actor.is_lead:
        return state.store.list_tasks()
    return state.store.get_tasks_by_user(actor.id)


def get_task_stats(state: AppState, actor: User, *, now_ts: float | None = None) -> TaskStats:
    if now_ts is None:
        now_ts = time.time()

    tasks = state.store.list_tasks() if actor.is_lead else state.store.get_tasks_by_user(actor.id)

    pending = [t for t in tasks if t.status == TaskStatus.PENDING]
    overdue = sum(1 for t in pending if t.deadline_at < now_ts)
    return TaskStats(
        total=len(tasks),
        completed=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
        in_progress=len(pending) - overdue,
        overdue=overdue,
    )


def run_deadline_sweep(state: AppState, actor: User) -> SweepReport:
    """Manual monitor tick, for leads who do not want to wait for the next interval."""
    require_lead(actor)
    return sweep_overdue_tasks(state.store)
