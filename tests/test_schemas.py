"""
Tests for the user context schema.
"""

import pytest
from pydantic import ValidationError

from rolegate.core.auth import Permission, Role
from rolegate.schemas import ANONYMOUS, UserContext


def test_permissions_coerced_from_identity_provider_format():
    user = UserContext(
        id="42",
        role="sales_person",
        permissions=[
            {"module": "inventory", "actions": ["read", "update"]},
            "reports:read",
        ],
        is_authenticated=True,
    )

    assert user.role is Role.SALES_PERSON
    assert user.permissions == frozenset({
        Permission("inventory", "read"),
        Permission("inventory", "update"),
        Permission("reports", "read"),
    })


def test_authenticated_user_requires_role():
    with pytest.raises(ValidationError):
        UserContext(id="42", is_authenticated=True)


def test_unknown_role_rejected():
    with pytest.raises(ValidationError):
        UserContext(id="42", role="employee", is_authenticated=True)


def test_malformed_permission_rejected():
    with pytest.raises(ValidationError):
        UserContext(id="42", role=Role.CUSTOMER, permissions=["inventory"], is_authenticated=True)


def test_from_attributes():
    class Record:
        id = "7"
        role = "customer"
        permissions = []
        is_authenticated = True
        is_loading = False

    user = UserContext.model_validate(Record(), from_attributes=True)

    assert user.role is Role.CUSTOMER
    assert user.key == "7"


def test_anonymous():
    assert not ANONYMOUS.is_authenticated
    assert ANONYMOUS.role is None
    assert ANONYMOUS.key == "anonymous"
    assert ANONYMOUS.permissions == frozenset()


def test_user_is_frozen():
    user = UserContext(id="1", role=Role.ADMIN, is_authenticated=True)

    with pytest.raises(ValidationError):
        user.role = Role.CUSTOMER
