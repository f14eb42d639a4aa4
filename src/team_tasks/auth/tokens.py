"""
Signed session tokens (JWT, HS256).

Tokens only carry the user id; the user record is re-read on every
authentication so role/domain changes apply immediately.
"""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta

import jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


def generate_dev_secret() -> str:
    """Per-process random secret; tokens do not survive a restart."""
    return f"DEV-ONLY-{secrets.token_hex(32)}"


class TokenIssuer:
    def __init__(self, secret: str, *, ttl_hours: int = 24) -> None:
        if not secret:
            raise ValueError("token secret is required")
        self._secret = secret
        self._ttl = timedelta(hours=max(1, int(ttl_hours)))

    def issue(self, user_id: int) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(int(user_id)),
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> int | None:
        """Return the user id, or None if the token is invalid or expired."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.debug("Token expired")
            return None
        except jwt.InvalidTokenError:
            logger.debug("Invalid token", exc_info=True)
            return None

        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None
