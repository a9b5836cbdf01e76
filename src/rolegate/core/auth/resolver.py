"""
Access resolver - route table plus permission layer.

Decision procedure for an authenticated caller:

1. Find the most specific route rule for the path.
2. Rule allows the role:
   check the most specific permission requirement as well and redirect
   if it is not satisfied; otherwise allow.
3. Rule denies the role, or no rule matches:
   a permission requirement that names a permission may still open the
   path, provided its role whitelist (if any) includes the role and the
   caller holds the permission. Anything else redirects.

Every redirect goes to the role's default route. Unknown paths are
therefore denied, never allowed.

Permissions considered at every step are the caller's explicit grants
plus the role's baseline grants (see permissions.ROLE_GRANTS).

Usage:
    resolver = AccessResolver()
    decision = resolver.resolve(Role.SALES_PERSON, set(), "/inventory")
    # AccessDecision(kind=REDIRECT, target="/pos")
"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from rolegate.core.exceptions import ConfigurationError

from .interfaces import AccessDecision, PolicyEngine
from .permissions import ROLE_GRANTS, Permission, effective_permissions
from .roles import ALL_ROLES, Role
from .tables import (
    PermissionTable,
    RouteTable,
    default_permission_table,
    default_route_table,
    normalize_path,
)


class AccessResolver(PolicyEngine):
    """
    Pure (role, permissions, path) -> AccessDecision resolver.

    Tables are injected once and never mutated. Construction fails with
    ConfigurationError when a role's own default route would redirect that
    role (a redirect loop).
    """

    def __init__(
        self,
        route_table: RouteTable | None = None,
        permission_table: PermissionTable | None = None,
        role_grants: Mapping[Role, frozenset[Permission]] = ROLE_GRANTS,
    ):
        self.route_table = route_table or default_route_table()
        self.permission_table = permission_table or default_permission_table()
        self.role_grants = dict(role_grants)
        self._check_default_routes()

    def _check_default_routes(self) -> None:
        for role in sorted(ALL_ROLES, key=lambda r: r.value):
            route = self.route_table.default_route(role)
            decision = self.resolve(role, frozenset(), route)
            if not decision.allowed:
                raise ConfigurationError(
                    f"Default route {route!r} of role {role.value!r} is not reachable "
                    f"for that role ({decision.reason})"
                )

    def default_route(self, role: Role) -> str:
        return self.route_table.default_route(role)

    def resolve(
        self,
        role: Role,
        permissions: Iterable[Permission],
        path: str,
    ) -> AccessDecision:
        """
        Decide whether role may enter path.

        Raises:
            ConfigurationError: role has no default route (unknown role)
        """
        # Fail fast before evaluating anything for an unknown role
        fallback = self.route_table.default_route(role)
        path = normalize_path(path)
        granted = effective_permissions(role, permissions, self.role_grants)

        rule = self.route_table.match(path)
        requirement = self.permission_table.match(path)

        if rule is not None and rule.allows(role):
            if requirement is not None and not requirement.is_satisfied_by(role, granted):
                return AccessDecision.redirect(
                    fallback,
                    f"Requirement on {requirement.prefix} not met",
                )
            return AccessDecision.allow(f"Role allowed under {rule.prefix}")

        if requirement is not None and requirement.can_override:
            if requirement.is_satisfied_by(role, granted):
                return AccessDecision.allow(f"Has permission: {requirement.permission}")
            return AccessDecision.redirect(
                fallback,
                f"Missing permission: {requirement.permission}",
            )

        if rule is None:
            return AccessDecision.redirect(fallback, f"No rule for {path}")
        return AccessDecision.redirect(fallback, f"Role not allowed under {rule.prefix}")

    def post_login_path(
        self,
        role: Role,
        permissions: Iterable[Permission],
        intended_path: str | None = None,
    ) -> str:
        """
        Where to land after login.

        The intended path if the role may enter it, else the default route.
        """
        if intended_path and self.resolve(role, permissions, intended_path).allowed:
            return normalize_path(intended_path)
        return self.default_route(role)


# ============================================================
# LINT
# ============================================================

@dataclass(frozen=True)
class LintIssue:
    prefix: str
    message: str
    role: Role | None = None


def lint_tables(resolver: AccessResolver) -> list[LintIssue]:
    """
    Report inconsistencies between the two tables.

    Not enforced at runtime. Reports:
    - duplicate prefixes in either table (later entries are unreachable)
    - roles a route rule allows that the permission layer still blocks
      with baseline grants only
    """
    issues: list[LintIssue] = []

    for kind, entries in (
        ("route rule", resolver.route_table.rules),
        ("permission requirement", resolver.permission_table.requirements),
    ):
        seen: set[str] = set()
        for entry in entries:
            if entry.prefix in seen:
                issues.append(LintIssue(entry.prefix, f"Duplicate {kind}; shadowed by an earlier entry"))
            seen.add(entry.prefix)

    for rule in resolver.route_table.rules:
        for role in sorted(rule.roles, key=lambda r: r.value):
            decision = resolver.resolve(role, frozenset(), rule.prefix)
            if not decision.allowed:
                issues.append(LintIssue(
                    rule.prefix,
                    f"Role allowed by route rule but blocked: {decision.reason}",
                    role=role,
                ))

    return issues
