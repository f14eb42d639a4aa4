# src/team_tasks/tasks/assignment.py

from __future__ import annotations

"""
Assignment engine: least-loaded selection within a domain.

Load is the number of tasks tagged with the domain that are assigned to the
user, counting every status. A member who already finished many tasks in a
domain is therefore still considered loaded there. This is not round-robin.
"""

import logging

from ..core.ports import TeamStore

logger = logging.getLogger(__name__)


def domain_load(store: TeamStore, domain: str) -> dict[int, int]:
    """
    Task count per domain user, in the store's user order.

    Every user preferring the domain starts at zero; tasks assigned to anyone
    else (or to nobody) are ignored.
    """
    counts = {user.id: 0 for user in store.get_users_by_domain(domain)}
    if not counts:
        return counts

    for task in store.get_tasks_by_domain(domain):
        if task.assigned_to is not None and task.assigned_to in counts:
            counts[task.assigned_to] += 1
    return counts


def select_assignee(store: TeamStore, domain: str) -> int | None:
    """
    Pick the domain user with the fewest tasks in that domain.

    Ties go to the user listed first by the store. Returns None when nobody
    prefers the domain; the task then stays unassigned.
    """
    counts = domain_load(store, domain)
    if not counts:
        logger.debug("No users in domain %r; leaving task unassigned", domain)
        return None

    selected: int | None = None
    min_count: int | None = None
    for user_id, count in counts.items():
        if min_count is None or count < min_count:
            min_count = count
            selected = user_id

    logger.debug("Domain %r load=%s -> user %s", domain, counts, selected)
    return selected
