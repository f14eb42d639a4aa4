"""
Errors surfaced to callers of the service layer.

Connectors show `message` to the user; anything outside this hierarchy is
treated as an internal error.
"""

from __future__ import annotations


class TeamTasksError(Exception):
    """Base exception for team_tasks."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ValidationError(TeamTasksError, ValueError):
    """Malformed or missing input."""


class AuthenticationError(TeamTasksError):
    """Missing/invalid token or wrong credentials."""


class PermissionDeniedError(TeamTasksError):
    """Authenticated, but the role or ownership does not allow the operation."""


class NotFoundError(TeamTasksError):
    """Referenced user/task does not exist (anymore)."""


class ConflictError(TeamTasksError):
    """Uniqueness violation (email, domain name)."""
