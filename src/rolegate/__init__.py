"""
rolegate - route authorization and session timeout policy engine.

Two independent pieces:
- AccessResolver: (role, permissions, path) -> AccessDecision
- SessionTimeoutEngine: idle tracking with Active -> Warning -> Expired

RouteGuard glues both to a navigation/tick driven consumer.
"""

from rolegate.core.auth import (
    AccessDecision,
    AccessResolver,
    DecisionKind,
    Permission,
    Role,
)
from rolegate.core.session import SessionEvent, SessionState, SessionTimeoutEngine

__version__ = "0.1.0"

__all__ = [
    "AccessDecision",
    "AccessResolver",
    "DecisionKind",
    "Permission",
    "Role",
    "SessionEvent",
    "SessionState",
    "SessionTimeoutEngine",
]
