"""
Hook system for guard lifecycle events.
Lets the presentation layer react to denials, warnings and logouts.
"""

from .manager import (
    ACCESS_DENIED,
    AUTH_LOGIN,
    AUTH_LOGOUT,
    SESSION_EXPIRED,
    SESSION_EXTENDED,
    SESSION_STARTED,
    SESSION_WARNING,
    Hook,
    HookManager,
    HookPriority,
    HookResult,
)

__all__ = [
    "HookManager",
    "Hook",
    "HookPriority",
    "HookResult",
    "ACCESS_DENIED",
    "AUTH_LOGIN",
    "AUTH_LOGOUT",
    "SESSION_EXPIRED",
    "SESSION_EXTENDED",
    "SESSION_STARTED",
    "SESSION_WARNING",
]
