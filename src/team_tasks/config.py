# src/team_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the token secret is generated at startup when missing).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TEAM_TASKS"

STORAGE_BACKENDS = ("memory", "sqlite")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    db_path: Path
    seed_demo_data: bool

    # ---- Deadline monitor ----
    monitor_enabled: bool
    monitor_interval_seconds: float

    # ---- Credentials ----
    jwt_secret: Optional[str]
    token_ttl_hours: int
    bcrypt_rounds: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "team-tasks")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/team_tasks"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "memory").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "memory"
        db_path = _env_path(_k("DB_PATH"), data_dir / "team_tasks.sqlite3")
        seed_demo_data = _env_bool(_k("SEED_DEMO_DATA"), True)

        monitor_enabled = _env_bool(_k("MONITOR_ENABLED"), True)
        monitor_interval_seconds = _env_float(_k("MONITOR_INTERVAL_SECONDS"), 60.0)

        # Accept the bare JWT_SECRET too, it is what most deployments already export.
        jwt_secret = _first_env(_k("JWT_SECRET"), "JWT_SECRET", default=None)
        token_ttl_hours = _env_int(_k("TOKEN_TTL_HOURS"), 24)
        bcrypt_rounds = _env_int(_k("BCRYPT_ROUNDS"), 12)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            storage_backend=storage_backend,
            db_path=db_path,
            seed_demo_data=seed_demo_data,
            monitor_enabled=monitor_enabled,
            monitor_interval_seconds=monitor_interval_seconds,
            jwt_secret=jwt_secret,
            token_ttl_hours=token_ttl_hours,
            bcrypt_rounds=bcrypt_rounds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
