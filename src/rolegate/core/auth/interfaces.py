"""
Authorization interfaces - Core abstractions.

Consumers depend on these types, never on a concrete table layout:
- AccessDecision: the result of one navigation check
- PolicyEngine: anything that maps (role, permissions, path) to a decision
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .permissions import Permission
from .roles import Role


# ============================================================
# ACCESS DECISION
# ============================================================

class DecisionKind(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"
    DENY = "deny"


@dataclass(frozen=True)
class AccessDecision:
    """
    Result of a navigation check.

    Produced fresh for every evaluation and never cached: role and
    permissions can change between two navigations.

    Attributes:
        kind: allow, redirect or deny
        target: Path to navigate to (redirect only)
        reason: Human-readable explanation (for logging)
    """
    kind: DecisionKind
    target: str | None = None
    reason: str | None = None

    @classmethod
    def allow(cls, reason: str | None = None) -> "AccessDecision":
        return cls(kind=DecisionKind.ALLOW, reason=reason)

    @classmethod
    def redirect(cls, target: str, reason: str | None = None) -> "AccessDecision":
        return cls(kind=DecisionKind.REDIRECT, target=target, reason=reason)

    @classmethod
    def deny(cls, reason: str = "Access denied") -> "AccessDecision":
        return cls(kind=DecisionKind.DENY, reason=reason)

    @property
    def allowed(self) -> bool:
        return self.kind is DecisionKind.ALLOW

    def __eq__(self, other: object) -> bool:
        # reason is diagnostic only
        if not isinstance(other, AccessDecision):
            return NotImplemented
        return self.kind == other.kind and self.target == other.target

    def __hash__(self) -> int:
        return hash((self.kind, self.target))


# ============================================================
# POLICY ENGINE
# ============================================================

class PolicyEngine(ABC):
    """
    Abstract navigation policy.

    Precondition: the caller is authenticated. Unauthenticated navigation
    is handled by the consumer (redirect to login) before any engine is
    consulted.
    """

    @abstractmethod
    def resolve(
        self,
        role: Role,
        permissions: Iterable[Permission],
        path: str,
    ) -> AccessDecision:
        """
        Decide whether role may enter path.

        Args:
            role: The caller's role
            permissions: Explicit (module, action) grants of the caller
            path: Navigation path

        Returns:
            AccessDecision (allow or redirect); never raises for an
            ordinary denial
        """
        pass

    @abstractmethod
    def default_route(self, role: Role) -> str:
        """Landing path for role."""
        pass

    def can_access(
        self,
        role: Role,
        permissions: Iterable[Permission],
        path: str,
    ) -> bool:
        """Check if role may enter path."""
        return self.resolve(role, permissions, path).allowed
