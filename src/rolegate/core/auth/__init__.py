"""
Authorization module - route access decisions.

Building blocks, leaf first:

    Role                   closed set of user roles
    Permission             (module, action) capability, wildcards allowed
    RouteTable             prefix -> roles, plus role default routes
    PermissionTable        prefix -> role whitelist and/or permission
    AccessResolver         combines both into an AccessDecision

Usage:
    from rolegate.core.auth import AccessResolver, Role

    resolver = AccessResolver()
    decision = resolver.resolve(Role.CUSTOMER, set(), "/customer/invoices")
    if not decision.allowed:
        navigate(decision.target)

Custom tables:
    resolver = AccessResolver(
        route_table=RouteTable(rules, default_routes),
        permission_table=PermissionTable(requirements),
    )

The resolver assumes an authenticated caller. Public pages and the
redirect to login are handled by the consumer (see rolegate.guard).
"""

from .interfaces import AccessDecision, DecisionKind, PolicyEngine
from .permissions import (
    ROLE_GRANTS,
    Permission,
    coerce_permissions,
    effective_permissions,
    has_permission,
)
from .resolver import AccessResolver, LintIssue, lint_tables
from .roles import ALL_ROLES, Role
from .tables import (
    DEFAULT_PERMISSION_REQUIREMENTS,
    DEFAULT_ROUTE_RULES,
    DEFAULT_ROUTES,
    PermissionRequirement,
    PermissionTable,
    RouteRule,
    RouteTable,
    default_permission_table,
    default_route_table,
    normalize_path,
)

__all__ = [
    # Decisions
    "AccessDecision",
    "DecisionKind",
    "PolicyEngine",
    # Roles & permissions
    "ALL_ROLES",
    "Role",
    "Permission",
    "ROLE_GRANTS",
    "coerce_permissions",
    "effective_permissions",
    "has_permission",
    # Tables
    "RouteRule",
    "RouteTable",
    "PermissionRequirement",
    "PermissionTable",
    "DEFAULT_ROUTES",
    "DEFAULT_ROUTE_RULES",
    "DEFAULT_PERMISSION_REQUIREMENTS",
    "default_route_table",
    "default_permission_table",
    "normalize_path",
    # Resolver
    "AccessResolver",
    "LintIssue",
    "lint_tables",
]
