# src/team_tasks/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..auth.tokens import TokenIssuer
from .ports import PasswordHasher, TeamStore


@dataclass
class AppState:
    # Settings object (real Settings or a test double with the same attributes).
    settings: Any

    store: TeamStore
    hasher: PasswordHasher
    tokens: TokenIssuer

    # Connector session id -> token (console uses a single "console" session).
    sessions: dict[str, str] = field(default_factory=dict)

    # Serializes command handling across connectors.
    lock: threading.RLock = field(default_factory=threading.RLock)
