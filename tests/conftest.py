"""
Pytest fixtures for testing.

Provides:
- Manual clock for deterministic session timing
- Default resolver and in-memory store
- Route guard wired with short session thresholds
- User factory and recording hook helpers
"""

from datetime import datetime, timedelta
from typing import Any

import pytest

from rolegate.core.auth import AccessResolver, Role
from rolegate.core.config import RoutingSettings, SessionSettings
from rolegate.core.hooks import (
    ACCESS_DENIED,
    AUTH_LOGIN,
    AUTH_LOGOUT,
    SESSION_EXPIRED,
    SESSION_EXTENDED,
    SESSION_STARTED,
    SESSION_WARNING,
    HookManager,
)
from rolegate.core.session import SessionTimeoutEngine
from rolegate.guard import RouteGuard
from rolegate.implementations.store import MemoryStore
from rolegate.schemas import ANONYMOUS, UserContext
from rolegate.utils.timezone import UTC, ManualClock


START = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)


# ============ Clock & Engine ============


@pytest.fixture
def clock() -> ManualClock:
    """Clock frozen at START; tests move it with clock.advance()."""
    return ManualClock(START)


@pytest.fixture
def engine(clock: ManualClock) -> SessionTimeoutEngine:
    """Engine with a 2 minute warning and a 5 minute timeout."""
    return SessionTimeoutEngine(
        warning_threshold=timedelta(minutes=2),
        timeout_threshold=timedelta(minutes=5),
        clock=clock,
    )


# ============ Resolver & Store ============


@pytest.fixture(scope="session")
def resolver() -> AccessResolver:
    """Resolver over the default tables."""
    return AccessResolver()


@pytest.fixture
def store(clock: ManualClock) -> MemoryStore:
    return MemoryStore(clock=clock)


# ============ Users ============


def make_user(
    role: Role | None = Role.SALES_PERSON,
    permissions: list[Any] | None = None,
    user_id: str | None = "user-1",
    **kwargs: Any,
) -> UserContext:
    """Build an authenticated user (pass role=None for an anonymous visitor)."""
    if role is None:
        return UserContext(id=None, **kwargs)
    return UserContext(
        id=user_id,
        role=role,
        permissions=permissions or [],
        is_authenticated=True,
        **kwargs,
    )


@pytest.fixture
def user_factory():
    """Fixture that provides make_user."""
    return make_user


@pytest.fixture
def sales_user() -> UserContext:
    return make_user(Role.SALES_PERSON)


@pytest.fixture
def anonymous() -> UserContext:
    return ANONYMOUS


# ============ Guard ============


class HookRecorder:
    """Collects (hook name, kwargs) for every triggered hook."""

    def __init__(self, hooks: HookManager, *names: str):
        self.calls: list[tuple[str, dict[str, Any]]] = []
        for name in names:
            hooks.register(name, self._recorder(name), source="recorder")

    def _recorder(self, name: str):
        async def record(**kwargs: Any) -> None:
            self.calls.append((name, kwargs))
        return record

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def last(self, name: str) -> dict[str, Any]:
        for called, kwargs in reversed(self.calls):
            if called == name:
                return kwargs
        raise AssertionError(f"Hook {name} was not triggered")


@pytest.fixture
def session_settings() -> SessionSettings:
    """10 minute timeout, warning from minute 8, 30 second activity throttle."""
    return SessionSettings(
        timeout_minutes=10,
        warning_minutes=2,
        min_activity_interval_seconds=30,
        show_status_threshold_minutes=5,
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def hooks() -> HookManager:
    return HookManager()


@pytest.fixture
def guard(
    resolver: AccessResolver,
    store: MemoryStore,
    hooks: HookManager,
    session_settings: SessionSettings,
    clock: ManualClock,
) -> RouteGuard:
    return RouteGuard(
        resolver,
        store,
        hooks=hooks,
        routing=RoutingSettings(),
        session_settings=session_settings,
        clock=clock,
    )


@pytest.fixture
def recorder(hooks: HookManager) -> HookRecorder:
    """Records every hook the guard publishes."""
    return HookRecorder(
        hooks,
        ACCESS_DENIED,
        AUTH_LOGIN,
        AUTH_LOGOUT,
        SESSION_EXPIRED,
        SESSION_EXTENDED,
        SESSION_STARTED,
        SESSION_WARNING,
    )
