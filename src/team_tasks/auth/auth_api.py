# src/team_tasks/auth/auth_api.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.errors import AuthenticationError, ValidationError
from ..core.models import User, UserRole
from ..core.state import AppState

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AuthResult:
    user: User
    token: str


def register_user(
    state: AppState,
    *,
    name: str,
    email: str,
    password: str,
    role: str | UserRole,
    preferred_domain: str | None = None,
) -> AuthResult:
    """
    Create an account and return it with a fresh token.

    Raises ValidationError for bad input and ConflictError if the email is taken.
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name:
        raise ValidationError("name is required")
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("a valid email is required")
    if not password:
        raise ValidationError("password is required")

    parsed_role = role if isinstance(role, UserRole) else UserRole.parse(role)
    if parsed_role is None:
        raise ValidationError("role must be 'lead' or 'member'")

    try:
        password_hash = state.hasher.hash(password)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    user = state.store.create_user(
        name=name,
        email=email,
        password_hash=password_hash,
        role=parsed_role,
        preferred_domain=(preferred_domain or "").strip() or None,
    )
    logger.info("Registered user id=%s role=%s", user.id, user.role.value)
    return AuthResult(user=user, token=state.tokens.issue(user.id))


def login(state: AppState, *, email: str, password: str) -> AuthResult:
    email = (email or "").strip().lower()
    if not email or not password:
        raise ValidationError("email and password are required")

    user = state.store.get_user_by_email(email)
    if user is None or not state.hasher.verify(password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise AuthenticationError("Invalid credentials", error_code="invalid_credentials")

    logger.info("User id=%s logged in", user.id)
    return AuthResult(user=user, token=state.tokens.issue(user.id))


def authenticate(state: AppState, token: str | None) -> User:
    """Resolve a token to the current user record."""
    if not token:
        raise AuthenticationError("Access token required", error_code="token_required")

    user_id = state.tokens.decode(token)
    if user_id is None:
        raise AuthenticationError("Invalid token", error_code="invalid_token")

    user = state.store.get_user(user_id)
    if user is None:
        raise AuthenticationError("Invalid token", error_code="unknown_user")
    return user
