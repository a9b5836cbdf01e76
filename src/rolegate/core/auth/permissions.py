"""
Fine-grained (module, action) permissions.

Permissions come from two places:
- Explicit grants on the user record (identity provider)
- Baseline grants every holder of a role receives

The resolver only ever looks at the union of both. Wildcards follow the
usual "resource:action" convention:
    "*:*"        matches everything
    "pos:*"      matches any action on the pos module
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .roles import Role

WILDCARD = "*"


@dataclass(frozen=True, order=True)
class Permission:
    """
    A (module, action) capability.

    Examples:
        Permission("pos", "read")
        Permission.parse("inventory:update")
        Permission.parse("*")          # global wildcard
    """
    module: str
    action: str

    @classmethod
    def parse(cls, value: str) -> "Permission":
        """Parse 'module:action'. A bare '*' is the global wildcard."""
        if value == WILDCARD:
            return cls(WILDCARD, WILDCARD)
        module, sep, action = value.partition(":")
        if not sep or not module or not action:
            raise ValueError(f"Permission must be 'module:action', got {value!r}")
        return cls(module, action)

    def implies(self, required: "Permission") -> bool:
        """True if holding self grants required."""
        if self.module == WILDCARD:
            return self.action in (WILDCARD, required.action)
        if self.module != required.module:
            return False
        return self.action in (WILDCARD, required.action)

    def __str__(self) -> str:
        return f"{self.module}:{self.action}"


def has_permission(granted: Iterable[Permission], required: Permission) -> bool:
    """Check if any granted permission implies required."""
    granted = frozenset(granted)
    if required in granted:
        return True
    return any(p.implies(required) for p in granted if WILDCARD in (p.module, p.action))


def coerce_permissions(raw: Iterable[Any] | None) -> frozenset[Permission]:
    """
    Normalize the permission formats found on user records.

    Accepts Permission objects, "module:action" strings,
    {"module": m, "action": a} and {"module": m, "actions": [a, ...]}.
    """
    result: set[Permission] = set()
    for item in raw or ():
        if isinstance(item, Permission):
            result.add(item)
        elif isinstance(item, str):
            result.add(Permission.parse(item))
        elif isinstance(item, Mapping):
            module = item.get("module")
            if not module:
                raise ValueError(f"Permission entry without module: {item!r}")
            if "actions" in item:
                result.update(Permission(module, action) for action in item["actions"])
            elif item.get("action"):
                result.add(Permission(module, item["action"]))
            else:
                raise ValueError(f"Permission entry without action: {item!r}")
        else:
            raise TypeError(f"Unsupported permission entry: {item!r}")
    return frozenset(result)


def _grants(module: str, *actions: str) -> set[Permission]:
    return {Permission(module, action) for action in actions}


# ============================================================
# ROLE BASELINE GRANTS
# ============================================================

ROLE_GRANTS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset({Permission(WILDCARD, WILDCARD)}),
    Role.MANAGER: frozenset(
        _grants("users", "read", "create", "update")
        | _grants("products", "read", "create", "update")
        | _grants("customers", "read", "create", "update")
        | _grants("suppliers", "read", "create", "update")
        | _grants("invoices", "read", "create", "update")
        | _grants("inventory", "read", "create", "update")
        | _grants("pos", "read", "create", "update")
        | _grants("reports", "read")
        | _grants("support", "read", "create", "update")
        | _grants("accounts", "read")
        | _grants("transactions", "read", "create")
        | _grants("workshop", "read", "create", "update")
        | _grants("settings", "read", "update")
        | _grants("customerInquiries", "read", "create", "update")
        | _grants("quotations", "read", "create", "update")
        | _grants("orders", "read", "create", "update")
        | _grants("deliveries", "read", "create", "update")
        | _grants("warehouses", "read", "update")
        | _grants("stockAlerts", "read", "update")
        | _grants("purchaseOrders", "read", "create", "update")
        | _grants("resources", "read", "update")
        | _grants("receivedGoods", "read", "create", "update")
    ),
    Role.SALES_PERSON: frozenset(
        _grants("pos", "read", "create", "update")
        | _grants("customers", "read", "create", "update")
        | _grants("invoices", "read", "create")
        | _grants("customerInquiries", "read", "create")
        | _grants("quotations", "read", "create")
        | _grants("orders", "read", "create")
        | _grants("support", "read", "create")
    ),
    Role.WORKSHOP_EMPLOYEE: frozenset(
        _grants("workshop", "read", "update")
        | _grants("customers", "read")
        | _grants("support", "read", "create")
    ),
    Role.WAREHOUSE_MANAGER: frozenset(
        _grants("inventory", "read", "create", "update")
        | _grants("deliveries", "read", "create", "update")
        | _grants("receivedGoods", "read", "create", "update")
    ),
    Role.WAREHOUSE_EMPLOYEE: frozenset(
        _grants("inventory", "read", "update")
        | _grants("deliveries", "read", "update")
        | _grants("receivedGoods", "read", "create")
    ),
    # Customer portal access is role based only
    Role.CUSTOMER: frozenset(),
}


def effective_permissions(
    role: Role,
    explicit: Iterable[Permission],
    role_grants: Mapping[Role, frozenset[Permission]] = ROLE_GRANTS,
) -> frozenset[Permission]:
    """Explicit grants plus the role's baseline grants."""
    return frozenset(explicit) | role_grants.get(role, frozenset())
