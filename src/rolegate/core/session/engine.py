"""
Session timeout engine.

Idle-time state machine:

    Active  --(idle >= warning threshold)-->  Warning
    Warning --(idle >= timeout threshold)-->  Expired
    Active/Warning --reset_timeout()-->       Active

State is derived, not stored: every query recomputes it from the clock and
the last activity timestamp, so a missed or late poll never skews it.
Polling only decides when a consumer *notices* a transition.

Expired is terminal. Resetting an expired session raises
SessionExpiredError; coming back from expiry is a re-authentication, which
creates a new engine.

Usage:
    engine = SessionTimeoutEngine(
        warning_threshold=timedelta(minutes=8),
        timeout_threshold=timedelta(minutes=10),
    )

    # on user input
    engine.record_activity()

    # on a timer
    for event in engine.poll():
        if event is SessionEvent.EXPIRE:
            force_logout()
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from rolegate.core.exceptions import (
    ConfigurationError,
    SessionClosedError,
    SessionExpiredError,
)
from rolegate.utils.timezone import Clock, to_utc, utc_now

if TYPE_CHECKING:
    from rolegate.core.config import SessionSettings


class SessionState(str, Enum):
    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"


class SessionEvent(str, Enum):
    ENTER_WARNING = "enter_warning"
    EXPIRE = "expire"


# State reached -> event announcing it
_TRANSITIONS: tuple[tuple[SessionState, SessionEvent], ...] = (
    (SessionState.WARNING, SessionEvent.ENTER_WARNING),
    (SessionState.EXPIRED, SessionEvent.EXPIRE),
)

_ORDER = {SessionState.ACTIVE: 0, SessionState.WARNING: 1, SessionState.EXPIRED: 2}


@dataclass(frozen=True)
class SessionStatus:
    """Read-only snapshot for a status indicator."""
    state: SessionState
    time_until_warning: timedelta
    time_until_timeout: timedelta
    show_indicator: bool


class SessionTimeoutEngine:
    """
    Per-session idle tracker.

    Args:
        warning_threshold: Idle time at which the warning starts
        timeout_threshold: Idle time at which the session expires
        clock: Returns the current time (timezone-aware UTC)
        min_activity_interval: record_activity() ignores input closer than
            this to the previous activity
        show_status_threshold: status() shows the indicator once less than
            this remains (None: only while warning)
        started_at: Initial activity timestamp (defaults to now)

    Raises:
        ConfigurationError: thresholds are negative or not ordered
    """

    def __init__(
        self,
        warning_threshold: timedelta,
        timeout_threshold: timedelta,
        *,
        clock: Clock = utc_now,
        min_activity_interval: timedelta = timedelta(0),
        show_status_threshold: timedelta | None = None,
        started_at: datetime | None = None,
    ):
        if warning_threshold < timedelta(0):
            raise ConfigurationError(
                f"Warning threshold must not be negative, got {warning_threshold}"
            )
        if timeout_threshold <= warning_threshold:
            raise ConfigurationError(
                f"Timeout threshold ({timeout_threshold}) must be greater than "
                f"warning threshold ({warning_threshold})"
            )
        if min_activity_interval < timedelta(0):
            raise ConfigurationError("Minimum activity interval must not be negative")

        self.warning_threshold = warning_threshold
        self.timeout_threshold = timeout_threshold
        self.min_activity_interval = min_activity_interval
        self.show_status_threshold = show_status_threshold
        self._clock = clock
        self._last_activity_at = to_utc(started_at) if started_at else self._now()
        self._notified = SessionState.ACTIVE
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: "SessionSettings",
        *,
        clock: Clock = utc_now,
        started_at: datetime | None = None,
    ) -> "SessionTimeoutEngine":
        """Build an engine from SessionSettings."""
        return cls(
            warning_threshold=settings.warning_threshold,
            timeout_threshold=settings.timeout_threshold,
            clock=clock,
            min_activity_interval=settings.min_activity_interval,
            show_status_threshold=settings.show_status_threshold,
            started_at=started_at,
        )

    # ============================================================
    # READ-ONLY QUERIES
    # ============================================================

    def _now(self) -> datetime:
        return to_utc(self._clock())

    @property
    def last_activity_at(self) -> datetime:
        return self._last_activity_at

    @property
    def closed(self) -> bool:
        return self._closed

    def idle_time(self) -> timedelta:
        """Time since the last activity. A clock that moved backwards counts as zero."""
        return max(timedelta(0), self._now() - self._last_activity_at)

    def _classify(self, idle: timedelta) -> SessionState:
        if idle >= self.timeout_threshold:
            return SessionState.EXPIRED
        if idle >= self.warning_threshold:
            return SessionState.WARNING
        return SessionState.ACTIVE

    def state(self) -> SessionState:
        return self._classify(self.idle_time())

    def time_until_warning(self) -> timedelta:
        return max(timedelta(0), self.warning_threshold - self.idle_time())

    def time_until_timeout(self) -> timedelta:
        return max(timedelta(0), self.timeout_threshold - self.idle_time())

    def is_expired(self) -> bool:
        return self.state() is SessionState.EXPIRED

    def status(self) -> SessionStatus:
        # Single clock read so the fields agree with each other
        idle = self.idle_time()
        remaining = max(timedelta(0), self.timeout_threshold - idle)
        state = self._classify(idle)

        show = state is SessionState.WARNING
        if self.show_status_threshold is not None and remaining > timedelta(0):
            show = show or remaining < self.show_status_threshold

        return SessionStatus(
            state=state,
            time_until_warning=max(timedelta(0), self.warning_threshold - idle),
            time_until_timeout=remaining,
            show_indicator=show,
        )

    # ============================================================
    # TRANSITIONS
    # ============================================================

    def reset_timeout(self) -> None:
        """
        Restart the idle timer ("extend session").

        Raises:
            SessionClosedError: the session was torn down
            SessionExpiredError: the session already expired
        """
        self._ensure_open()
        if self.is_expired():
            raise SessionExpiredError("Session already expired; re-authentication required")
        self._last_activity_at = self._now()
        self._notified = SessionState.ACTIVE

    def record_activity(self) -> bool:
        """
        Throttled reset for user input.

        Returns True if the timer was reset, False if the activity came too
        soon after the previous one.

        Raises:
            SessionClosedError: the session was torn down
            SessionExpiredError: the session already expired
        """
        self._ensure_open()
        if self.is_expired():
            raise SessionExpiredError("Session already expired; re-authentication required")
        if self.idle_time() < self.min_activity_interval:
            return False
        self.reset_timeout()
        return True

    def poll(self) -> list[SessionEvent]:
        """
        Events for transitions crossed since the previous poll.

        Each event is reported once per idle period, in order; a poll that
        jumps from Active straight to Expired returns both. A closed engine
        reports nothing.
        """
        if self._closed:
            return []

        current = self.state()
        events = [
            event
            for state, event in _TRANSITIONS
            if _ORDER[self._notified] < _ORDER[state] <= _ORDER[current]
        ]
        if _ORDER[current] > _ORDER[self._notified]:
            self._notified = current
        return events

    def close(self) -> None:
        """Tear down. Subsequent polls report nothing and resets raise."""
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session was closed")
