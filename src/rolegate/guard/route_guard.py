"""
Route guard - the consumer side of the resolver and the timeout engine.

Two independent entry points:
- on_navigation(): called by the routing layer for every navigation
- on_tick(): called on a fixed interval (start_polling() runs it as an
  asyncio task) to notice session transitions

The guard owns the per-session engine. Expiry forces logout; logout tears
the engine down and cancels the polling task so nothing fires afterwards.
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from rolegate.core.auth import AccessDecision, AccessResolver, normalize_path
from rolegate.core.auth.tables import prefix_matches
from rolegate.core.config import RoutingSettings, SessionSettings, Settings
from rolegate.core.exceptions import SessionExpiredError, UnauthenticatedAccessError
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
from rolegate.core.interfaces import KeyValueStore
from rolegate.core.session import SessionEvent, SessionStatus, SessionTimeoutEngine
from rolegate.implementations.register import create_store
from rolegate.schemas import UserContext
from rolegate.utils.timezone import Clock, to_iso8601, to_milliseconds, utc_now

logger = structlog.get_logger()


class RouteGuard:
    """
    Navigation and session glue for one client.

    Usage:
        guard = RouteGuard(resolver, store=MemoryStore())

        decision = await guard.on_navigation(user, "/inventory")
        if decision.kind is DecisionKind.REDIRECT:
            router.push(decision.target)

        target = await guard.on_login(user)
        await guard.start_polling()
    """

    def __init__(
        self,
        resolver: AccessResolver,
        store: KeyValueStore,
        *,
        hooks: HookManager | None = None,
        routing: RoutingSettings | None = None,
        session_settings: SessionSettings | None = None,
        clock: Clock = utc_now,
    ):
        self.resolver = resolver
        self.store = store
        self.hooks = hooks or HookManager()
        self.routing = routing or RoutingSettings()
        self.session_settings = session_settings or SessionSettings()
        self._clock = clock
        self._engine: SessionTimeoutEngine | None = None
        self._user: UserContext | None = None
        self._poll_task: asyncio.Task | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        resolver: AccessResolver | None = None,
        store: KeyValueStore | None = None,
        hooks: HookManager | None = None,
        clock: Clock = utc_now,
    ) -> "RouteGuard":
        """Build a guard with the default tables and the configured store."""
        return cls(
            resolver or AccessResolver(),
            store or create_store(settings.routing),
            hooks=hooks,
            routing=settings.routing,
            session_settings=settings.session,
            clock=clock,
        )

    # ============================================================
    # NAVIGATION
    # ============================================================

    def is_public(self, path: str) -> bool:
        path = normalize_path(path)
        return any(prefix_matches(prefix, path) for prefix in self.routing.public_prefixes)

    def _intended_key(self, user: UserContext) -> str:
        return f"{self.routing.intended_path_key}:{user.key}"

    async def on_navigation(self, user: UserContext, path: str) -> AccessDecision:
        """
        Decide what to do with a navigation attempt.

        - public path: allow
        - user state still loading: deny (render nothing yet)
        - not authenticated: remember the path, redirect to login
        - session expired: logout, redirect to login
        - otherwise: the resolver's decision
        """
        path = normalize_path(path)

        if self.is_public(path):
            return AccessDecision.allow("Public path")

        if user.is_loading:
            return AccessDecision.deny("User state loading")

        if not user.is_authenticated or user.role is None:
            await self.store.set(
                self._intended_key(user),
                path,
                ttl=self.routing.intended_path_ttl_seconds,
            )
            logger.info("access.login_required", path=path)
            return AccessDecision.redirect(self.routing.login_path, "Not authenticated")

        if self._engine is not None and self._engine.is_expired():
            await self._expire()
            await self.store.set(
                self._intended_key(user),
                path,
                ttl=self.routing.intended_path_ttl_seconds,
            )
            return AccessDecision.redirect(self.routing.login_path, "Session expired")

        decision = self.resolver.resolve(user.role, user.permissions, path)
        if not decision.allowed:
            logger.info(
                "access.redirect",
                role=user.role.value,
                path=path,
                target=decision.target,
                reason=decision.reason,
            )
            await self.hooks.trigger(ACCESS_DENIED, user=user, path=path, decision=decision)
        return decision

    async def on_login(self, user: UserContext) -> str:
        """
        Start the session and return the post-login landing path.

        Consumes the stored intended path of the anonymous visitor and of
        the user, whichever exists.
        """
        if not user.is_authenticated or user.role is None:
            raise UnauthenticatedAccessError("on_login called for an unauthenticated user")

        intended = await self.store.pop(self._intended_key(user))
        anonymous_key = f"{self.routing.intended_path_key}:anonymous"
        anonymous_intended = await self.store.pop(anonymous_key)
        intended = intended or anonymous_intended

        target = self.resolver.post_login_path(user.role, user.permissions, intended)
        await self.start_session(user)
        await self.hooks.trigger(AUTH_LOGIN, user=user, target=target)
        logger.info("auth.login", role=user.role.value, target=target, intended=intended)
        return target

    # ============================================================
    # SESSION
    # ============================================================

    @property
    def engine(self) -> SessionTimeoutEngine | None:
        return self._engine

    async def start_session(self, user: UserContext) -> SessionTimeoutEngine:
        """
        Begin idle tracking for an authenticated user.

        Replaces any previous session of this guard.
        """
        if not user.is_authenticated:
            raise UnauthenticatedAccessError("Cannot start a session for an unauthenticated user")
        if self._engine is not None:
            self._engine.close()

        self._user = user
        self._engine = SessionTimeoutEngine.from_settings(self.session_settings, clock=self._clock)
        logger.info("session.started", role=user.role.value if user.role else None)
        await self.hooks.trigger(SESSION_STARTED, user=user)
        return self._engine

    def status(self) -> SessionStatus | None:
        return self._engine.status() if self._engine else None

    def on_activity(self) -> bool:
        """
        User input. Throttled; returns True if the timer was reset.

        Activity after expiry does not reset anything; the next tick or
        navigation logs the user out.
        """
        if self._engine is None or self._engine.closed:
            return False
        try:
            return self._engine.record_activity()
        except SessionExpiredError:
            return False

    async def extend_session(self) -> SessionStatus:
        """
        "Stay logged in" action.

        Raises:
            SessionExpiredError: the session already expired
        """
        if self._engine is None:
            raise UnauthenticatedAccessError("No active session")
        self._engine.reset_timeout()
        status = self._engine.status()
        await self.hooks.trigger(SESSION_EXTENDED, status=status)
        return status

    async def on_tick(self) -> list[SessionEvent]:
        """Poll the engine once and react to the transitions it reports."""
        if self._engine is None:
            return []

        engine = self._engine
        events = engine.poll()
        for event in events:
            if event is SessionEvent.ENTER_WARNING:
                status = engine.status()
                logger.info(
                    "session.warning",
                    remaining_ms=to_milliseconds(status.time_until_timeout),
                )
                await self.hooks.trigger(SESSION_WARNING, status=status)
            elif event is SessionEvent.EXPIRE:
                await self._expire()
        return events

    async def _expire(self) -> None:
        engine = self._engine
        if engine is None:
            return
        status = engine.status()
        logger.warning(
            "session.expired",
            last_activity_at=to_iso8601(engine.last_activity_at),
            idle_ms=to_milliseconds(engine.idle_time()),
        )
        await self.hooks.trigger(SESSION_EXPIRED, status=status)
        await self.logout(reason="expired")

    async def logout(self, reason: str = "user") -> None:
        """Tear the session down. Nothing fires for it afterwards."""
        engine, self._engine = self._engine, None
        user, self._user = self._user, None
        if engine is not None:
            engine.close()
        await self._cancel_polling()
        if engine is not None or user is not None:
            logger.info("auth.logout", reason=reason)
            await self.hooks.trigger(AUTH_LOGOUT, reason=reason)

    # ============================================================
    # POLLING
    # ============================================================

    async def _poll_loop(self) -> None:
        interval = self.session_settings.poll_interval_seconds
        while self._engine is not None:
            await self.on_tick()
            await asyncio.sleep(interval)

    async def start_polling(self) -> asyncio.Task:
        """Run on_tick() every poll interval until logout or stop_polling()."""
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_loop())
        return self._poll_task

    async def _cancel_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        # The loop may be the caller (expiry inside on_tick); it exits on its own
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def stop_polling(self) -> None:
        """Stop the polling task without ending the session."""
        await self._cancel_polling()
