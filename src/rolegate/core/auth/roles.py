"""
Role definitions.

The role set is closed. Every role must own exactly one default route in
the route table; a role without one is a configuration error.
"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SALES_PERSON = "sales_person"
    WORKSHOP_EMPLOYEE = "workshop_employee"
    WAREHOUSE_MANAGER = "warehouse_manager"
    WAREHOUSE_EMPLOYEE = "warehouse_employee"
    CUSTOMER = "customer"

    def __str__(self) -> str:
        return self.value


ALL_ROLES: frozenset[Role] = frozenset(Role)

WAREHOUSE_ROLES: frozenset[Role] = frozenset({
    Role.WAREHOUSE_MANAGER,
    Role.WAREHOUSE_EMPLOYEE,
})
