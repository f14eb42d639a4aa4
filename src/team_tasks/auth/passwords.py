"""
Password hashing with bcrypt.

The service layer only sees the PasswordHasher port; this is the default adapter.
"""

from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; longer inputs are rejected instead of silently truncated.
MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher:
    def __init__(self, rounds: int = 12) -> None:
        # bcrypt accepts 4..31
        self._rounds = max(4, min(31, int(rounds)))

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Raises:
            ValueError: If password is empty or too long
        """
        if not password:
            raise ValueError("Password cannot be empty")

        raw = password.encode("utf-8")
        if len(raw) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password exceeds maximum length of {MAX_PASSWORD_BYTES} bytes")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(raw, salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        if not password or not hashed:
            return False

        raw = password.encode("utf-8")
        if len(raw) > MAX_PASSWORD_BYTES:
            return False

        try:
            return bcrypt.checkpw(raw, hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash.
            logger.warning("Password verification failed: stored hash is not a bcrypt hash")
            return False
