"""Unit tests for the role / ownership policy table."""

import pytest

from ems.core.exceptions import AuthorizationError
from ems.models.user import User
from ems.services.access import POLICY, Scope, authorize, owner_filter, scope_for

ADMIN = User(id=1, role="Admin")
EMPLOYEE = User(id=2, role="Employee")


def test_admin_has_full_scope_everywhere():
    for resource, actions in POLICY.items():
        for action in actions:
            assert scope_for(ADMIN, resource, action) is Scope.ALL


@pytest.mark.parametrize(
    "resource, action",
    [
        ("employee", "list"),
        ("employee", "delete"),
        ("department", "create"),
        ("attendance", "stats"),
        ("leave", "review"),
        ("salary", "create"),
        ("salary", "review"),
    ],
)
def test_employee_denied_admin_actions(resource, action):
    with pytest.raises(AuthorizationError, match="Admin privileges required"):
        authorize(EMPLOYEE, resource, action)


@pytest.mark.parametrize(
    "resource, action",
    [("employee", "read"), ("attendance", "mark"), ("leave", "create"), ("salary", "list")],
)
def test_employee_own_scope(resource, action):
    assert authorize(EMPLOYEE, resource, action) is Scope.OWN
    assert authorize(EMPLOYEE, resource, action, owner_id=EMPLOYEE.id) is Scope.OWN
    with pytest.raises(AuthorizationError, match="only access your own data"):
        authorize(EMPLOYEE, resource, action, owner_id=99)


def test_departments_readable_by_everyone():
    assert authorize(EMPLOYEE, "department", "list") is Scope.ALL


def test_unknown_pairs_and_roles_are_denied():
    assert scope_for(ADMIN, "payroll", "export") is Scope.DENY
    assert scope_for(User(id=3, role="Contractor"), "department", "list") is Scope.DENY


def test_owner_filter():
    assert owner_filter(EMPLOYEE, Scope.OWN) == EMPLOYEE.id
    assert owner_filter(ADMIN, Scope.ALL) is None
