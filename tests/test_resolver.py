"""
Tests for the access resolver.
"""

import pytest

from rolegate.core.auth import (
    DEFAULT_ROUTES,
    AccessDecision,
    AccessResolver,
    DecisionKind,
    Permission,
    PermissionRequirement,
    PermissionTable,
    Role,
    RouteRule,
    RouteTable,
    lint_tables,
)
from rolegate.core.auth.resolver import LintIssue
from rolegate.core.exceptions import ConfigurationError


def _custom_resolver(rules, requirements=()) -> AccessResolver:
    """Resolver where every role lands on /home."""
    home = RouteRule("/home", frozenset(Role))
    routes = {role: "/home" for role in Role}
    return AccessResolver(
        route_table=RouteTable([home, *rules], routes),
        permission_table=PermissionTable(requirements),
        role_grants={},
    )


# ============ Core properties ============


@pytest.mark.parametrize("role", list(Role))
def test_unknown_path_redirects_to_default_route(resolver, role):
    decision = resolver.resolve(role, frozenset(), "/no/such/page")

    assert decision == AccessDecision.redirect(DEFAULT_ROUTES[role])


@pytest.mark.parametrize("role", list(Role))
def test_default_route_is_reachable(resolver, role):
    decision = resolver.resolve(role, frozenset(), DEFAULT_ROUTES[role])

    assert decision.kind is DecisionKind.ALLOW


def test_resolve_is_idempotent(resolver):
    first = resolver.resolve(Role.WAREHOUSE_EMPLOYEE, frozenset(), "/warehouse-portal/employees")
    second = resolver.resolve(Role.WAREHOUSE_EMPLOYEE, frozenset(), "/warehouse-portal/employees")

    assert first == second
    assert first.reason == second.reason


def test_longest_prefix_wins():
    resolver = _custom_resolver([
        RouteRule("/a", frozenset({Role.MANAGER})),
        RouteRule("/a/b", frozenset({Role.SALES_PERSON})),
    ])

    assert resolver.resolve(Role.SALES_PERSON, frozenset(), "/a/b/c").allowed
    assert resolver.resolve(Role.MANAGER, frozenset(), "/a/b/c") == AccessDecision.redirect("/home")
    assert resolver.resolve(Role.MANAGER, frozenset(), "/a/x").allowed


def test_equal_prefix_tie_goes_to_earlier_rule():
    resolver = _custom_resolver([
        RouteRule("/a", frozenset({Role.MANAGER})),
        RouteRule("/a", frozenset({Role.SALES_PERSON})),
    ])

    assert resolver.resolve(Role.MANAGER, frozenset(), "/a").allowed
    assert not resolver.resolve(Role.SALES_PERSON, frozenset(), "/a").allowed


def test_unknown_role_fails_fast(resolver):
    with pytest.raises(ConfigurationError):
        resolver.resolve("ghost", frozenset(), "/dashboard")


def test_path_is_normalized(resolver):
    assert resolver.resolve(Role.CUSTOMER, frozenset(), "/customer/invoices/?tab=open").allowed


# ============ Scenarios ============


def test_sales_person_redirected_from_inventory(resolver):
    decision = resolver.resolve(Role.SALES_PERSON, frozenset(), "/inventory")

    assert decision.kind is DecisionKind.REDIRECT
    assert decision.target == "/pos"


def test_customer_allowed_into_customer_invoices(resolver):
    decision = resolver.resolve(Role.CUSTOMER, frozenset(), "/customer/invoices")

    assert decision == AccessDecision.allow()


def test_customer_kept_out_of_staff_pages(resolver):
    for path in ("/customers", "/invoices", "/dashboard", "/pos"):
        assert resolver.resolve(Role.CUSTOMER, frozenset(), path) == AccessDecision.redirect("/customer")


def test_staff_kept_out_of_customer_portal(resolver):
    decision = resolver.resolve(Role.ADMIN, frozenset(), "/customer/orders")

    assert decision == AccessDecision.redirect("/dashboard")


def test_warehouse_employee_blocked_from_management_pages(resolver):
    """A role whitelist never opens a path the route table closed."""
    decision = resolver.resolve(Role.WAREHOUSE_EMPLOYEE, frozenset(), "/warehouse-portal/employees")

    assert decision == AccessDecision.redirect("/warehouse-portal")
    assert resolver.resolve(Role.WAREHOUSE_MANAGER, frozenset(), "/warehouse-portal/employees").allowed
    assert resolver.resolve(Role.WAREHOUSE_EMPLOYEE, frozenset(), "/warehouse-portal/inventory").allowed


# ============ Permission layer ============


def test_explicit_permission_overrides_coarse_rule(resolver):
    granted = {Permission("inventory", "read")}

    assert resolver.resolve(Role.SALES_PERSON, granted, "/inventory").allowed


def test_module_wildcard_overrides_coarse_rule(resolver):
    granted = {Permission("inventory", "*")}

    assert resolver.resolve(Role.WORKSHOP_EMPLOYEE, granted, "/inventory/items").allowed


def test_baseline_grant_overrides_coarse_rule(resolver):
    """Managers reach /analytics through their reports:read grant."""
    assert resolver.resolve(Role.MANAGER, frozenset(), "/analytics").allowed
    assert not resolver.resolve(Role.SALES_PERSON, frozenset(), "/analytics").allowed


def test_override_respects_role_whitelist():
    resolver = _custom_resolver(
        [RouteRule("/reports", frozenset({Role.ADMIN}))],
        [PermissionRequirement(
            "/reports",
            roles=frozenset({Role.MANAGER}),
            permission=Permission("reports", "read"),
        )],
    )
    granted = {Permission("reports", "read")}

    assert resolver.resolve(Role.MANAGER, granted, "/reports").allowed
    assert not resolver.resolve(Role.SALES_PERSON, granted, "/reports").allowed


def test_permission_requirement_refines_allowed_rule():
    resolver = _custom_resolver(
        [RouteRule("/reports", frozenset({Role.MANAGER}))],
        [PermissionRequirement("/reports/export", permission=Permission("reports", "export"))],
    )

    assert resolver.resolve(Role.MANAGER, frozenset(), "/reports/daily").allowed
    assert not resolver.resolve(Role.MANAGER, frozenset(), "/reports/export").allowed
    assert resolver.resolve(Role.MANAGER, {Permission("reports", "export")}, "/reports/export").allowed


def test_requirement_alone_opens_unruled_path():
    resolver = _custom_resolver(
        [],
        [PermissionRequirement("/beta", permission=Permission("beta", "read"))],
    )

    assert resolver.resolve(Role.CUSTOMER, {Permission("beta", "read")}, "/beta").allowed
    assert resolver.resolve(Role.CUSTOMER, frozenset(), "/beta") == AccessDecision.redirect("/home")


def test_can_access(resolver):
    assert resolver.can_access(Role.SALES_PERSON, frozenset(), "/pos/checkout")
    assert not resolver.can_access(Role.SALES_PERSON, frozenset(), "/settings")


# ============ Construction ============


def test_unreachable_default_route_rejected():
    routes = {role: "/home" for role in Role}
    rules = [RouteRule("/home", frozenset({Role.ADMIN}))]

    with pytest.raises(ConfigurationError) as exc:
        AccessResolver(
            route_table=RouteTable(rules, routes),
            permission_table=PermissionTable([]),
        )

    assert "not reachable" in str(exc.value)


# ============ Post-login redirect ============


def test_post_login_path_uses_allowed_intended_path(resolver):
    target = resolver.post_login_path(Role.SALES_PERSON, frozenset(), "/orders/42/")

    assert target == "/orders/42"


def test_post_login_path_falls_back_to_default_route(resolver):
    assert resolver.post_login_path(Role.SALES_PERSON, frozenset(), "/settings") == "/pos"
    assert resolver.post_login_path(Role.CUSTOMER, frozenset(), None) == "/customer"


# ============ Lint ============


def test_default_tables_lint_clean(resolver):
    assert lint_tables(resolver) == []


def test_lint_reports_duplicates_and_blocked_roles():
    resolver = _custom_resolver(
        [
            RouteRule("/a", frozenset({Role.MANAGER})),
            RouteRule("/a", frozenset({Role.SALES_PERSON})),
            RouteRule("/stock", frozenset({Role.MANAGER})),
        ],
        [PermissionRequirement("/stock", permission=Permission("stock", "read"))],
    )

    issues = lint_tables(resolver)

    assert LintIssue("/a", "Duplicate route rule; shadowed by an earlier entry") in issues
    blocked = [issue for issue in issues if issue.role is not None]
    assert [(i.prefix, i.role) for i in blocked] == [
        ("/a", Role.SALES_PERSON),
        ("/stock", Role.MANAGER),
    ]
