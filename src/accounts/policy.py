"""Access policy for ticketing operations.

Every controller asks ``authorize`` instead of checking roles itself, so the
role-to-action mapping lives in one place.
"""

import typing as t

from django.contrib.auth.models import AnonymousUser

from accounts.models import BoxofficeUser

Role = BoxofficeUser.Role


class Action:
    ISSUE_TICKETS = "issue_tickets"
    MANAGE_TICKETS = "manage_tickets"
    CHECK_IN = "check_in"
    VIEW_CHECK_INS = "view_check_ins"
    MANAGE_ACCESS_CARDS = "manage_access_cards"
    VIEW_SALES_STATS = "view_sales_stats"


POLICY: dict[str, frozenset[str]] = {
    Action.ISSUE_TICKETS: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.CLUB_MANAGER}),
    Action.MANAGE_TICKETS: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.CLUB_MANAGER}),
    Action.CHECK_IN: frozenset({Role.GATEKEEPER}),
    Action.VIEW_CHECK_INS: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.GATEKEEPER}),
    Action.MANAGE_ACCESS_CARDS: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.CLUB_MANAGER}),
    Action.VIEW_SALES_STATS: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.CLUB_MANAGER}),
}


def authorize(actor: BoxofficeUser | AnonymousUser | None, action: str, resource: t.Any = None) -> bool:
    """Decide whether an actor may perform an action, optionally on a specific resource.

    Superusers may do everything, anonymous actors nothing. When the resource of a
    ``view_check_ins`` request is a user, gatekeepers may only look at their own entries.
    Unknown actions are denied.
    """
    if actor is None or not actor.is_authenticated or not actor.is_active:
        return False
    if actor.is_superuser:
        return True
    actor = t.cast(BoxofficeUser, actor)
    if actor.role not in POLICY.get(action, frozenset()):
        return False
    if action == Action.VIEW_CHECK_INS and isinstance(resource, BoxofficeUser) and actor.role == Role.GATEKEEPER:
        return resource.pk == actor.pk
    return True
