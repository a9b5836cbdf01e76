"""
Session timeout state machine.
"""

from .engine import SessionEvent, SessionState, SessionStatus, SessionTimeoutEngine

__all__ = [
    "SessionEvent",
    "SessionState",
    "SessionStatus",
    "SessionTimeoutEngine",
]
