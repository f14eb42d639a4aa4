# src/team_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store/hasher/tokens),
- seeds demo data into an empty store (optional).
"""

from __future__ import annotations

import logging

from ..auth.passwords import BcryptPasswordHasher
from ..auth.tokens import TokenIssuer, generate_dev_secret
from ..config import get_settings
from ..core.ports import TeamStore
from ..core.state import AppState
from ..storage.memory_store import MemoryTeamStore
from ..storage.seed import seed_demo_data
from ..storage.sqlite_store import SqliteTeamStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def build_store(settings) -> TeamStore:
    backend = str(getattr(settings, "storage_backend", "memory")).lower()
    if backend == "sqlite":
        return SqliteTeamStore(settings.db_path)
    return MemoryTeamStore()


def _token_secret(settings) -> str:
    secret = getattr(settings, "jwt_secret", None)
    if secret:
        return secret
    logger.warning(
        "JWT secret not set - using a generated per-process secret. "
        "Set TEAM_TASKS_JWT_SECRET to keep sessions valid across restarts."
    )
    return generate_dev_secret()


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = build_store(settings)
    hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    tokens = TokenIssuer(_token_secret(settings), ttl_hours=settings.token_ttl_hours)

    if settings.seed_demo_data:
        seed_demo_data(store, hasher)

    return AppState(settings=settings, store=store, hasher=hasher, tokens=tokens)
