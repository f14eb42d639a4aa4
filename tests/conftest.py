# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from team_tasks.auth.tokens import TokenIssuer
from team_tasks.core.state import AppState
from team_tasks.storage.memory_store import MemoryTeamStore
from team_tasks.storage.sqlite_store import SqliteTeamStore

from .fakes import FakePasswordHasher

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap code.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="team-tasks-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=tmp_path,
        storage_backend="memory",
        db_path=tmp_path / "team_tasks.sqlite3",
        seed_demo_data=False,
        monitor_enabled=False,
        monitor_interval_seconds=0.01,
        jwt_secret=TEST_SECRET,
        token_ttl_hours=1,
        bcrypt_rounds=4,
    )


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path: Path):
    """Every store-level test runs against both adapters."""
    if request.param == "sqlite":
        return SqliteTeamStore(tmp_path / "store.sqlite3")
    return MemoryTeamStore()


@pytest.fixture()
def state(settings: SimpleNamespace, store) -> AppState:
    """
    AppState wired with a fast fake hasher.

    NOTE: the store is real (parametrized over both adapters) because the
    service helpers are only as correct as the store contract they rely on.
    """
    return AppState(
        settings=settings,
        store=store,
        hasher=FakePasswordHasher(),
        tokens=TokenIssuer(TEST_SECRET, ttl_hours=1),
    )
