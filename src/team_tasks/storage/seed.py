# src/team_tasks/storage/seed.py

from __future__ import annotations

import logging

from ..core.models import UserRole
from ..core.ports import PasswordHasher, TeamStore

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_LEAD = ("John Doe", "lead@example.com")

DEMO_DOMAINS = (
    ("Design", "UI/UX design, prototyping, and visual assets"),
    ("Development", "Frontend and backend development tasks"),
    ("Research", "Market research and user studies"),
)

DEMO_MEMBERS = (
    ("Sarah Wilson", "sarah@example.com", "Design"),
    ("Mike Chen", "mike@example.com", "Development"),
    ("Lisa Park", "lisa@example.com", "Research"),
)


def seed_demo_data(store: TeamStore, hasher: PasswordHasher) -> bool:
    """
    Populate an empty store with one lead, three domains and one member per domain.

    Returns False (and does nothing) if the store already has users.
    All demo accounts share DEMO_PASSWORD.
    """
    if store.count_users() > 0:
        return False

    password_hash = hasher.hash(DEMO_PASSWORD)

    lead_name, lead_email = DEMO_LEAD
    lead = store.create_user(
        name=lead_name,
        email=lead_email,
        password_hash=password_hash,
        role=UserRole.LEAD,
    )

    for name, description in DEMO_DOMAINS:
        store.create_domain(name=name, description=description, created_by=lead.id)

    for name, email, domain in DEMO_MEMBERS:
        store.create_user(
            name=name,
            email=email,
            password_hash=password_hash,
            role=UserRole.MEMBER,
            preferred_domain=domain,
        )

    logger.info(
        "Seeded demo data: 1 lead, %d domains, %d members (login %s)",
        len(DEMO_DOMAINS),
        len(DEMO_MEMBERS),
        lead_email,
    )
    return True
