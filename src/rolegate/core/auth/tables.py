"""
Static route tables.

Two tables drive navigation decisions:

RouteTable
    Coarse rules: path prefix -> roles allowed to enter, plus the default
    landing route of every role.

PermissionTable
    Fine-grained requirements: path prefix -> role whitelist and/or a
    required (module, action) permission.

Matching is segment aware: prefix "/customer" matches "/customer" and
"/customer/orders" but not "/customer-inquiries". The most specific
(longest) matching prefix wins; equal-length matches go to the entry
declared first.

Both tables are immutable once built and are meant to be constructed once
at startup and injected into the resolver.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, TypeVar

from rolegate.core.exceptions import ConfigurationError

from .permissions import Permission, has_permission
from .roles import ALL_ROLES, WAREHOUSE_ROLES, Role


def normalize_path(path: str) -> str:
    """
    Normalize a navigation path.

    Drops query string and fragment, collapses repeated slashes and strips
    the trailing slash (except for the root path).
    """
    path = path.partition("#")[0].partition("?")[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    while "//" in path:
        path = path.replace("//", "/")
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def prefix_matches(prefix: str, path: str) -> bool:
    """Segment-aware prefix test."""
    if prefix == "/":
        return True
    return path == prefix or path.startswith(prefix + "/")


def _validate_prefix(prefix: str) -> None:
    if not prefix.startswith("/"):
        raise ConfigurationError(f"Route prefix must start with '/': {prefix!r}")
    if prefix != "/" and prefix.endswith("/"):
        raise ConfigurationError(f"Route prefix must not end with '/': {prefix!r}")
    if "?" in prefix or "#" in prefix:
        raise ConfigurationError(f"Route prefix must be a bare path: {prefix!r}")


@dataclass(frozen=True)
class RouteRule:
    """Roles allowed under a path prefix."""
    prefix: str
    roles: frozenset[Role]

    def __post_init__(self) -> None:
        _validate_prefix(self.prefix)
        object.__setattr__(self, "roles", frozenset(self.roles))

    def matches(self, path: str) -> bool:
        return prefix_matches(self.prefix, path)

    def allows(self, role: Role) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class PermissionRequirement:
    """
    Fine-grained requirement for a path prefix.

    roles is checked first, then permission. A role whitelist only ever
    restricts; only a permission can open a path the route table closed.
    An entry with neither constrains nothing.
    """
    prefix: str
    roles: frozenset[Role] | None = None
    permission: Permission | None = None

    def __post_init__(self) -> None:
        _validate_prefix(self.prefix)
        if self.roles is not None:
            object.__setattr__(self, "roles", frozenset(self.roles))

    def matches(self, path: str) -> bool:
        return prefix_matches(self.prefix, path)

    @property
    def can_override(self) -> bool:
        return self.permission is not None

    def is_satisfied_by(self, role: Role, granted: Iterable[Permission]) -> bool:
        if self.roles is not None and role not in self.roles:
            return False
        if self.permission is not None and not has_permission(granted, self.permission):
            return False
        return True


_EntryT = TypeVar("_EntryT", RouteRule, PermissionRequirement)


def most_specific(entries: Sequence[_EntryT], path: str) -> _EntryT | None:
    """
    Longest matching prefix; the earliest declared entry wins a tie.
    """
    best: _EntryT | None = None
    for entry in entries:
        if not entry.matches(path):
            continue
        # strict > keeps the first of equal-length matches
        if best is None or len(entry.prefix) > len(best.prefix):
            best = entry
    return best


class RouteTable:
    """
    Coarse role rules and per-role default routes.

    Raises:
        ConfigurationError: if a role of the closed set has no default route
    """

    def __init__(
        self,
        rules: Iterable[RouteRule],
        default_routes: Mapping[Role, str],
    ):
        self._rules: tuple[RouteRule, ...] = tuple(rules)
        self._default_routes: dict[Role, str] = dict(default_routes)

        missing = ALL_ROLES - self._default_routes.keys()
        if missing:
            names = sorted(r.value for r in missing)
            raise ConfigurationError(f"Roles without a default route: {names}")
        for role, route in self._default_routes.items():
            _validate_prefix(route)

    @property
    def rules(self) -> tuple[RouteRule, ...]:
        return self._rules

    @property
    def default_routes(self) -> Mapping[Role, str]:
        return dict(self._default_routes)

    def match(self, path: str) -> RouteRule | None:
        return most_specific(self._rules, path)

    def default_route(self, role: Role) -> str:
        try:
            return self._default_routes[role]
        except KeyError:
            raise ConfigurationError(f"No default route for role {role!r}") from None


class PermissionTable:
    """Fine-grained requirements, checked on top of the route table."""

    def __init__(self, requirements: Iterable[PermissionRequirement]):
        self._requirements: tuple[PermissionRequirement, ...] = tuple(requirements)

    @property
    def requirements(self) -> tuple[PermissionRequirement, ...]:
        return self._requirements

    def match(self, path: str) -> PermissionRequirement | None:
        return most_specific(self._requirements, path)


# ============================================================
# DEFAULT TABLES
# ============================================================

A = Role.ADMIN
M = Role.MANAGER
S = Role.SALES_PERSON
W = Role.WORKSHOP_EMPLOYEE
WM = Role.WAREHOUSE_MANAGER
WE = Role.WAREHOUSE_EMPLOYEE
C = Role.CUSTOMER


def _rule(prefix: str, *roles: Role) -> RouteRule:
    return RouteRule(prefix, frozenset(roles))


DEFAULT_ROUTES: dict[Role, str] = {
    A: "/dashboard",
    M: "/dashboard",
    S: "/pos",
    W: "/workshop",
    C: "/customer",
    WM: "/warehouse-portal",
    WE: "/warehouse-portal",
}

DEFAULT_ROUTE_RULES: tuple[RouteRule, ...] = (
    _rule("/dashboard", A, M, S),
    _rule("/users", A, M),
    _rule("/products", A, M),
    _rule("/customers", A, M, S, W),
    _rule("/suppliers", A, M),
    _rule("/invoices", A, M, S),
    _rule("/inventory", A, M, *WAREHOUSE_ROLES),
    _rule("/pos", A, M, S),
    _rule("/sales-outlets", A, M),
    _rule("/support", A, M, S, W),
    _rule("/accounts", A, M),
    _rule("/transactions", A, M),
    _rule("/workshop", A, M, W),
    _rule("/service-templates", A, M, W),
    _rule("/reports", A, M),
    _rule("/reports-analytics", A, M),
    _rule("/sales-report", A, M),
    _rule("/settings", A, M),
    _rule("/analytics", A),
    _rule("/customer-inquiries", A, M, S),
    _rule("/quotations", A, M, S),
    _rule("/orders", A, M, S),
    _rule("/deliveries", A, M, *WAREHOUSE_ROLES),
    _rule("/warehouses", A, M),
    _rule("/warehouse-portal", A, M, *WAREHOUSE_ROLES),
    # Warehouse management pages are closed to warehouse employees
    _rule("/warehouse-portal/employees", A, M, WM),
    _rule("/warehouse-portal/deliveries", A, M, WM),
    _rule("/warehouse-portal/settings", A, M, WM),
    _rule("/stock-alerts", A, M),
    _rule("/purchase-orders", A, M),
    _rule("/resources", A, M),
    _rule("/received-goods", A, M, *WAREHOUSE_ROLES),
    _rule("/customer", C),
    _rule("/profile", *ALL_ROLES),
)


def _require(module: str, action: str = "read") -> Permission:
    return Permission(module, action)


DEFAULT_PERMISSION_REQUIREMENTS: tuple[PermissionRequirement, ...] = (
    PermissionRequirement("/dashboard"),
    PermissionRequirement("/pos", permission=_require("pos")),
    PermissionRequirement("/sales-outlets", roles=frozenset({A, M})),
    PermissionRequirement("/workshop", permission=_require("workshop")),
    PermissionRequirement("/service-templates", permission=_require("workshop")),
    PermissionRequirement("/users", permission=_require("users")),
    PermissionRequirement("/products", permission=_require("products")),
    PermissionRequirement("/customers", permission=_require("customers")),
    PermissionRequirement("/suppliers", permission=_require("suppliers")),
    PermissionRequirement("/invoices", permission=_require("invoices")),
    PermissionRequirement("/inventory", permission=_require("inventory")),
    PermissionRequirement("/support", permission=_require("support")),
    PermissionRequirement("/transactions", permission=_require("transactions")),
    PermissionRequirement("/reports", permission=_require("reports")),
    PermissionRequirement("/settings", permission=_require("settings")),
    PermissionRequirement("/customer-inquiries", permission=_require("customerInquiries")),
    PermissionRequirement("/quotations", permission=_require("quotations")),
    PermissionRequirement("/orders", permission=_require("orders")),
    PermissionRequirement("/deliveries", permission=_require("deliveries")),
    PermissionRequirement("/warehouses", permission=_require("warehouses")),
    PermissionRequirement("/warehouse-portal", roles=frozenset({A, M, *WAREHOUSE_ROLES})),
    PermissionRequirement("/stock-alerts", permission=_require("stockAlerts")),
    PermissionRequirement("/purchase-orders", permission=_require("purchaseOrders")),
    PermissionRequirement("/analytics", permission=_require("reports")),
    PermissionRequirement("/resources", permission=_require("resources")),
    PermissionRequirement("/received-goods", permission=_require("receivedGoods")),
    PermissionRequirement("/customer", roles=frozenset({C})),
    PermissionRequirement("/profile"),
)


def default_route_table() -> RouteTable:
    return RouteTable(DEFAULT_ROUTE_RULES, DEFAULT_ROUTES)


def default_permission_table() -> PermissionTable:
    return PermissionTable(DEFAULT_PERMISSION_REQUIREMENTS)


__all__ = [
    "RouteRule",
    "PermissionRequirement",
    "RouteTable",
    "PermissionTable",
    "DEFAULT_ROUTES",
    "DEFAULT_ROUTE_RULES",
    "DEFAULT_PERMISSION_REQUIREMENTS",
    "default_route_table",
    "default_permission_table",
    "most_specific",
    "normalize_path",
    "prefix_matches",
]
