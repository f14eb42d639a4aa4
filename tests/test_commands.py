# tests/test_commands.py

from __future__ import annotations

from datetime import datetime

import pytest

from team_tasks.cli.bootstrap import create_initial_state
from team_tasks.cli.commands import CommandRegistry, parse_deadline, registry
from team_tasks.connectors.console_connector import handle_console_line
from team_tasks.core.errors import ValidationError
from team_tasks.core.models import TaskStatus
from team_tasks.storage.memory_store import MemoryTeamStore
from team_tasks.storage.sqlite_store import SqliteTeamStore


def test_command_registry_routes_3_and_4_params(state) -> None:
    reg = CommandRegistry()
    called = {"h3": 0, "h4": 0}

    def h3(state, args, session_id):
        called["h3"] += 1
        return f"h3 {session_id} {args}"

    def h4(state, args, session_id, emit):
        called["h4"] += 1
        if emit is not None:
            emit("note")
        return "h4"

    reg.register("a", h3, "a")
    reg.register("b", h4, "b", aliases=["bee"])

    notes: list[str] = []
    assert reg.handle(state, "/a x 'y z'", session_id="s1") == "h3 s1 ['x', 'y z']"
    assert reg.handle(state, "/BEE", emit=notes.append) == "h4"
    assert called == {"h3": 1, "h4": 1}
    assert notes == ["note"]
    assert "/a - a" in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")
    assert "Cannot parse" in (reg.handle(state, "/a 'unterminated") or "")


def test_commands_require_login(state) -> None:
    reply = registry.handle(state, "/tasks")
    assert reply is not None and reply.startswith("Error: Not logged in")


def test_console_flow(state) -> None:
    say = lambda line, who="lead": handle_console_line(state, line, session_id=who)  # noqa: E731

    assert say("/register lead@example.com pw lead Team Lead").startswith("Registered")
    assert "created" in say('/domain add Design "UI and UX"')
    assert "Design (0 member(s)) - UI and UX" in say("/domains")

    assert say("/register sarah@example.com pw member Sarah Wilson", who="sarah").startswith("Registered")
    assert "Design" in say("/prefer Design", who="sarah")

    created = say("/task new Design +2h high Hero banner | first draft")
    assert created.startswith("Created #1 [high] Hero banner")
    sarah = state.store.get_user_by_email("sarah@example.com")
    assert state.store.get_task(1).assigned_to == sarah.id
    assert state.store.get_task(1).description == "first draft"

    assert "Hero banner" in say("/tasks mine", who="sarah")
    assert "completed" in say("/task done 1", who="sarah")
    assert state.store.get_task(1).status == TaskStatus.COMPLETED

    stats = say("/stats")
    assert "Total: 1" in stats and "Completed: 1" in stats

    assert say("/sweep", who="sarah").startswith("Error:")
    assert say("/sweep").startswith("Sweep: checked=0")

    assert say("/logout", who="sarah") == "Logged out."
    assert say("/me", who="sarah").startswith("Error: Not logged in")
    assert "Sarah Wilson" in say("/login sarah@example.com pw", who="sarah")
    assert say("/login sarah@example.com nope", who="sarah") == "Error: Invalid credentials"


def test_task_in_unstaffed_domain_emits_notice(state, capsys) -> None:
    handle_console_line(state, "/register lead@example.com pw lead Lead")

    reply = handle_console_line(state, "/task new Research +1d low Survey")

    assert "unassigned" in reply
    assert "stays unassigned" in capsys.readouterr().out


def test_console_non_command_and_crash(state, monkeypatch) -> None:
    assert handle_console_line(state, "hello").startswith("Commands start with '/'")

    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(state.store, "list_domains", boom)
    handle_console_line(state, "/register lead@example.com pw lead Lead")
    assert handle_console_line(state, "/domains") == "Internal error while handling a command."


def test_parse_deadline_relative_and_iso() -> None:
    assert parse_deadline("+30m", now_ts=1000.0) == 1000.0 + 1800
    assert parse_deadline("+2h", now_ts=0.0) == 7200.0
    assert parse_deadline("+1.5d", now_ts=0.0) == 1.5 * 86400

    assert parse_deadline("2030-01-02T03:04:05+00:00") == datetime.fromisoformat(
        "2030-01-02T03:04:05+00:00"
    ).timestamp()
    assert parse_deadline("2030-01-02") == datetime(2030, 1, 2).timestamp()

    with pytest.raises(ValidationError):
        parse_deadline("next week")


def test_bootstrap_seeds_demo_data(settings) -> None:
    settings.seed_demo_data = True
    settings.jwt_secret = ""

    state = create_initial_state(settings=settings)

    assert isinstance(state.store, MemoryTeamStore)
    assert settings.data_dir.exists()
    assert state.store.get_user_by_email("lead@example.com") is not None
    reply = handle_console_line(state, "/login lead@example.com password123")
    assert reply.startswith("Logged in as")


def test_bootstrap_sqlite_backend(settings) -> None:
    settings.storage_backend = "sqlite"
    settings.db_path = settings.data_dir / "db" / "team.sqlite3"
    settings.seed_demo_data = True

    state = create_initial_state(settings=settings)

    assert isinstance(state.store, SqliteTeamStore)
    assert settings.db_path.exists()
    assert state.store.count_users() == 4

    reopened = create_initial_state(settings=settings)
    assert reopened.store.count_users() == 4
