# src/team_tasks/teams/team_api.py

from __future__ import annotations

import logging

from ..core.errors import NotFoundError, PermissionDeniedError, ValidationError
from ..core.models import Domain, User
from ..core.state import AppState

logger = logging.getLogger(__name__)


def require_lead(actor: User) -> None:
    if not actor.is_lead:
        raise PermissionDeniedError("Team lead access required", error_code="lead_required")


def list_domains(state: AppState) -> list[Domain]:
    return state.store.list_domains()


def create_domain(
    state: AppState,
    actor: User,
    *,
    name: str,
    description: str | None = None,
) -> Domain:
    """Leads only. Domain names are unique (ConflictError otherwise)."""
    require_lead(actor)

    name = (name or "").strip()
    if not name:
        raise ValidationError("domain name is required")

    domain = state.store.create_domain(
        name=name,
        description=(description or "").strip() or None,
        created_by=actor.id,
    )
    logger.info("Domain %r created by user %s", domain.name, actor.id)
    return domain


def set_preferred_domain(state: AppState, actor: User, domain: str) -> User:
    """
    Self-service preference update.

    The name is stored as-is; it is a reference, not a foreign key, so it is
    not checked against existing domains.
    """
    domain = (domain or "").strip()
    if not domain:
        raise ValidationError("Domain is required")

    updated = state.store.update_user_domain(actor.id, domain)
    if updated is None:
        raise NotFoundError("User not found", error_code="user_not_found")

    logger.info("User %s now prefers domain %r", actor.id, domain)
    return updated


def list_users(state: AppState, actor: User, *, domain: str | None = None) -> list[User]:
    """Domain filter if given; otherwise leads see everyone and members only themselves."""
    if domain:
        return state.store.get_users_by_domain(domain)
    if actor.is_lead:
        return state.store.list_users()
    return [actor]
