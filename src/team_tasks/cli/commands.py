# src/team_tasks/cli/commands.py

from __future__ import annotations

import inspect
import logging
import re
import shlex
import time
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..auth import auth_api
from ..core.errors import AuthenticationError, TeamTasksError, ValidationError
from ..core.models import Task, TaskStatus, User
from ..core.state import AppState
from ..tasks import task_api
from ..teams import team_api

CommandEmitter = Callable[[str], None]
CommandHandler3 = Callable[[AppState, list[str], str], str]
CommandHandler4 = Callable[[AppState, list[str], str, CommandEmitter | None], str]
CommandHandler = CommandHandler3 | CommandHandler4

DEFAULT_SESSION = "console"

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /login, /task ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        session_id: str = DEFAULT_SESSION,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        TeamTasksError is turned into a user-facing reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 4

        try:
            if nparams >= 4:
                h4 = cast(CommandHandler4, handler)
                return h4(state, args, session_id, emit)

            h3 = cast(CommandHandler3, handler)
            return h3(state, args, session_id)
        except TeamTasksError as e:
            logger.debug("/%s rejected: %s", name, e.message)
            return f"Error: {e.message}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----

_RELATIVE_RE = re.compile(r"^\+(\d+(?:\.\d+)?)([mhd])$")
_UNIT_SECONDS = {"m": 60, "h": 3600, "d": 86400}


def parse_deadline(raw: str, *, now_ts: float | None = None) -> float:
    """
    "+30m" / "+2h" / "+3d" relative to now, or an ISO date/datetime.
    Naive ISO values are read as local time.
    """
    raw = (raw or "").strip()
    m = _RELATIVE_RE.match(raw)
    if m:
        base = time.time() if now_ts is None else now_ts
        return base + float(m.group(1)) * _UNIT_SECONDS[m.group(2)]

    try:
        dt = datetime.fromisoformat(raw)
    except ValueError as e:
        raise ValidationError(f"Cannot parse deadline {raw!r} (use +2h, +3d or an ISO date)") from e
    return dt.astimezone().timestamp()


def _fmt_ts(ts: float | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def _fmt_task(task: Task, *, now_ts: float) -> str:
    assignee = f"user {task.assigned_to}" if task.assigned_to is not None else "unassigned"
    status = task.status.value
    if task.is_overdue(now_ts):
        status = "overdue"
    elif task.status == TaskStatus.COMPLETED:
        status = f"completed {_fmt_ts(task.completed_at)}"
    return (
        f"#{task.id} [{task.priority.value}] {task.title} "
        f"(domain={task.domain}, {assignee}, due {_fmt_ts(task.deadline_at)}, {status})"
    )


def _fmt_user(user: User) -> str:
    domain = user.preferred_domain or "-"
    return f"#{user.id} {user.name} <{user.email}> role={user.role.value} domain={domain}"


def _current_user(state: AppState, session_id: str) -> User:
    token = state.sessions.get(session_id)
    if not token:
        raise AuthenticationError("Not logged in. Use /login <email> <password>.")
    return auth_api.authenticate(state, token)


def _parse_id(raw: str, what: str = "task id") -> int:
    try:
        return int(raw.lstrip("#"))
    except ValueError as e:
        raise ValidationError(f"Invalid {what}: {raw!r}") from e


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], session_id: str) -> str:
    return registry.build_help()


def cmd_register(state: AppState, args: list[str], session_id: str) -> str:
    """/register <email> <password> <lead|member> <name...>"""
    if len(args) < 4:
        return "Usage: /register <email> <password> <lead|member> <name...>"
    email, password, role = args[0], args[1], args[2]
    name = " ".join(args[3:])
    result = auth_api.register_user(state, name=name, email=email, password=password, role=role)
    state.sessions[session_id] = result.token
    return f"Registered and logged in as {_fmt_user(result.user)}"


def cmd_login(state: AppState, args: list[str], session_id: str) -> str:
    if len(args) != 2:
        return "Usage: /login <email> <password>"
    result = auth_api.login(state, email=args[0], password=args[1])
    state.sessions[session_id] = result.token
    return f"Logged in as {_fmt_user(result.user)}"


def cmd_logout(state: AppState, args: list[str], session_id: str) -> str:
    if state.sessions.pop(session_id, None) is None:
        return "Not logged in."
    return "Logged out."


def cmd_me(state: AppState, args: list[str], session_id: str) -> str:
    return _fmt_user(_current_user(state, session_id))


def cmd_domains(state: AppState, args: list[str], session_id: str) -> str:
    _current_user(state, session_id)
    domains = team_api.list_domains(state)
    if not domains:
        return "No domains yet."
    lines = ["Domains:"]
    for d in domains:
        members = len(state.store.get_users_by_domain(d.name))
        desc = f" - {d.description}" if d.description else ""
        lines.append(f"  {d.name} ({members} member(s)){desc}")
    return "\n".join(lines)


def cmd_domain(state: AppState, args: list[str], session_id: str) -> str:
    """/domain add <name> [description...]"""
    if len(args) < 2 or args[0].lower() != "add":
        return "Usage: /domain add <name> [description...]"
    actor = _current_user(state, session_id)
    domain = team_api.create_domain(state, actor, name=args[1], description=" ".join(args[2:]))
    return f"Domain {domain.name!r} created."


def cmd_prefer(state: AppState, args: list[str], session_id: str) -> str:
    if len(args) != 1:
        return "Usage: /prefer <domain>"
    actor = _current_user(state, session_id)
    user = team_api.set_preferred_domain(state, actor, args[0])
    return f"Preferred domain set to {user.preferred_domain!r}."


def cmd_users(state: AppState, args: list[str], session_id: str) -> str:
    actor = _current_user(state, session_id)
    users = team_api.list_users(state, actor, domain=args[0] if args else None)
    if not users:
        return "No users."
    return "\n".join(["Users:"] + [f"  {_fmt_user(u)}" for u in users])


def cmd_tasks(state: AppState, args: list[str], session_id: str) -> str:
    """
    /tasks                 -> all tasks (lead) or own tasks (member)
    /tasks mine            -> own tasks
    /tasks domain <name>   -> tasks of a domain
    /tasks user <id>       -> tasks assigned to a user
    """
    actor = _current_user(state, session_id)

    user_id: int | None = None
    domain: str | None = None
    if args:
        sub = args[0].lower()
        if sub == "mine":
            user_id = actor.id
        elif sub == "domain" and len(args) == 2:
            domain = args[1]
        elif sub == "user" and len(args) == 2:
            user_id = _parse_id(args[1], "user id")
        else:
            return "Usage: /tasks [mine | domain <name> | user <id>]"

    tasks = task_api.list_tasks(state, actor, user_id=user_id, domain=domain)
    if not tasks:
        return "No tasks."
    now_ts = time.time()
    return "\n".join(["Tasks:"] + [f"  {_fmt_task(t, now_ts=now_ts)}" for t in tasks])


def cmd_task(
    state: AppState,
    args: list[str],
    session_id: str,
    emit: CommandEmitter | None = None,
) -> str:
    """
    /task new <domain> <deadline> <priority> <title...> [| description...]
    /task done <id>
    /task reopen <id>
    """
    usage = (
        "Usage:\n"
        "  /task new <domain> <deadline> <priority> <title...> [| description...]\n"
        "  /task done <id>\n"
        "  /task reopen <id>"
    )
    if not args:
        return usage

    sub = args[0].lower()
    actor = _current_user(state, session_id)

    if sub == "new":
        if len(args) < 5:
            return usage
        domain, deadline_raw, priority = args[1], args[2], args[3]
        text = " ".join(args[4:])
        title, _, description = text.partition("|")
        task = task_api.create_task(
            state,
            actor,
            title=title,
            domain=domain,
            deadline_at=parse_deadline(deadline_raw),
            description=description,
            priority=priority,
        )
        if task.assigned_to is None and emit is not None:
            emit(f"[TASK] Nobody prefers {domain!r} yet; task #{task.id} stays unassigned.")
        return f"Created {_fmt_task(task, now_ts=time.time())}"

    if sub in ("done", "reopen"):
        if len(args) != 2:
            return usage
        status = TaskStatus.COMPLETED if sub == "done" else TaskStatus.PENDING
        task = task_api.update_task_status(state, actor, _parse_id(args[1]), status)
        return f"Updated {_fmt_task(task, now_ts=time.time())}"

    return usage


def cmd_stats(state: AppState, args: list[str], session_id: str) -> str:
    actor = _current_user(state, session_id)
    s = task_api.get_task_stats(state, actor)
    return (
        "Stats:\n"
        f"  Total: {s.total}\n"
        f"  Completed: {s.completed}\n"
        f"  In progress: {s.in_progress}\n"
        f"  Overdue: {s.overdue}"
    )


def cmd_sweep(state: AppState, args: list[str], session_id: str) -> str:
    actor = _current_user(state, session_id)
    report = task_api.run_deadline_sweep(state, actor)
    if report.error:
        return f"Sweep failed: {report.error}"
    lines = [
        f"Sweep: checked={report.checked} reassigned={len(report.reassigned)} "
        f"unchanged={report.unchanged} failed={len(report.failed)}"
    ]
    for r in report.reassigned:
        lines.append(f"  #{r.task_id}: user {r.from_user_id} -> user {r.to_user_id}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "register",
    cmd_register,
    help_text="Create an account: /register <email> <password> <lead|member> <name...>.",
)
registry.register("login", cmd_login, help_text="Log in: /login <email> <password>.")
registry.register("logout", cmd_logout, help_text="Forget the current session.")
registry.register("me", cmd_me, help_text="Show the logged-in user.")
registry.register("domains", cmd_domains, help_text="List domains.")
registry.register("domain", cmd_domain, help_text="Create a domain (lead): /domain add <name> [description].")
registry.register("prefer", cmd_prefer, help_text="Set your preferred domain: /prefer <domain>.")
registry.register("users", cmd_users, help_text="List users: /users [domain].")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [mine | domain <name> | user <id>].")
registry.register(
    "task",
    cmd_task,
    help_text="Create/update tasks: /task new ... | /task done <id> | /task reopen <id>.",
)
registry.register("stats", cmd_stats, help_text="Task counters (total/completed/in progress/overdue).")
registry.register("sweep", cmd_sweep, help_text="Run the overdue reassignment sweep now (lead).")
