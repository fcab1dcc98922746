"""
Access control gate.

One policy table maps ``(role, resource, action)`` to a scope:

- ``ALL``: the caller may act on every record,
- ``OWN``: only on records whose owner is the caller,
- ``DENY``: not at all.

Endpoints never branch on ``user.role`` themselves; they ask
:func:`authorize` (usually through ``deps.require_permission``) and use
:func:`owner_filter` to scope list queries.
"""

from __future__ import annotations

from enum import Enum

from ems.core.enums import Role
from ems.core.exceptions import AuthorizationError
from ems.models.user import User


class Scope(str, Enum):
    ALL = "all"
    OWN = "own"
    DENY = "deny"


def _rules(admin: Scope, employee: Scope, *actions: str) -> dict[str, dict[Role, Scope]]:
    return {action: {Role.ADMIN: admin, Role.EMPLOYEE: employee} for action in actions}


POLICY: dict[str, dict[str, dict[Role, Scope]]] = {
    "employee": {
        **_rules(Scope.ALL, Scope.DENY, "list", "create", "update", "delete", "stats"),
        **_rules(Scope.ALL, Scope.OWN, "read"),
    },
    "department": {
        **_rules(Scope.ALL, Scope.ALL, "list", "read"),
        **_rules(Scope.ALL, Scope.DENY, "create", "update", "delete"),
    },
    "attendance": {
        **_rules(Scope.ALL, Scope.OWN, "mark", "list", "today"),
        **_rules(Scope.ALL, Scope.DENY, "stats", "update", "delete"),
    },
    "leave": {
        **_rules(Scope.ALL, Scope.OWN, "list", "create", "delete"),
        **_rules(Scope.ALL, Scope.DENY, "review"),
    },
    "salary": {
        **_rules(Scope.ALL, Scope.OWN, "list"),
        **_rules(Scope.ALL, Scope.DENY, "create", "update", "review", "delete"),
    },
}


def scope_for(user: User, resource: str, action: str) -> Scope:
    """Look up the caller's scope; unknown roles or pairs are denied."""
    try:
        role = Role(user.role)
    except ValueError:
        return Scope.DENY
    return POLICY.get(resource, {}).get(action, {}).get(role, Scope.DENY)


def authorize(user: User, resource: str, action: str, owner_id: int | None = None) -> Scope:
    """Raise :class:`AuthorizationError` unless *user* may perform the action.

    Pass ``owner_id`` when checking a single existing record; ``OWN``
    scope then also requires that the record belongs to the caller.
    """
    scope = scope_for(user, resource, action)
    if scope is Scope.DENY:
        if user.role == Role.EMPLOYEE:
            raise AuthorizationError("Access denied. Admin privileges required.")
        raise AuthorizationError()
    if scope is Scope.OWN and owner_id is not None and owner_id != user.id:
        raise AuthorizationError("Access denied. You can only access your own data.")
    return scope


def owner_filter(user: User, scope: Scope) -> int | None:
    """User id that list queries must be restricted to, or ``None`` for all."""
    return user.id if scope is Scope.OWN else None
