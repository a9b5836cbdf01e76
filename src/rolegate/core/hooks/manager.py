"""
Hook manager for guard lifecycle events.
"""
from __future__ import annotations

from typing import Callable, Any, Awaitable
from dataclasses import dataclass, field
from enum import IntEnum
from collections import defaultdict
import logging

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Any]]


class HookPriority(IntEnum):
    """Handler order within one event (lower runs first)."""
    FIRST = 0
    NORMAL = 50
    LAST = 100


# Event names published by RouteGuard
ACCESS_DENIED = "access.denied"
SESSION_STARTED = "session.started"
SESSION_WARNING = "session.warning"
SESSION_EXPIRED = "session.expired"
SESSION_EXTENDED = "session.extended"
AUTH_LOGIN = "auth.login"
AUTH_LOGOUT = "auth.logout"


@dataclass
class Hook:
    name: str
    handler: Handler
    priority: HookPriority = HookPriority.NORMAL
    source: str = ""


@dataclass
class HookResult:
    """Return values and handler failures of one trigger() call."""
    hook_name: str
    results: list[Any] = field(default_factory=list)
    errors: list[tuple[str, Exception]] = field(default_factory=list)


class HookManager:
    """
    Dispatches guard events to async handlers.

    Events and their keyword arguments:
    - access.denied: user, path, decision
    - session.started: user
    - session.warning: status
    - session.expired: status (logout follows)
    - session.extended: status
    - auth.login: user, target
    - auth.logout: reason

    A failing handler is logged and recorded on the HookResult; the guard
    carries on with the remaining handlers.

    Example usage:
    ```python
    hooks = HookManager()

    @hooks.on(SESSION_WARNING)
    async def show_warning(status: SessionStatus):
        notify(f"Logging out in {status.time_until_timeout}")
    ```
    """

    def __init__(self):
        self._hooks: dict[str, list[Hook]] = defaultdict(list)

    def register(
        self,
        name: str,
        handler: Handler,
        *,
        priority: HookPriority = HookPriority.NORMAL,
        source: str = "",
    ) -> Hook:
        hook = Hook(name=name, handler=handler, priority=priority, source=source)
        handlers = self._hooks[name]
        handlers.append(hook)
        # sort is stable: registration order holds within a priority
        handlers.sort(key=lambda h: h.priority)
        logger.debug(f"Registered hook: {name} (priority={priority})")
        return hook

    def unregister(self, name: str, handler: Handler) -> bool:
        handlers = self._hooks.get(name, [])
        for hook in handlers:
            if hook.handler is handler:
                handlers.remove(hook)
                return True
        return False

    def on(
        self,
        name: str,
        *,
        priority: HookPriority = HookPriority.NORMAL,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        def decorator(func: Handler) -> Handler:
            self.register(name, func, priority=priority)
            return func
        return decorator

    async def trigger(self, name: str, **kwargs: Any) -> HookResult:
        """Await every handler for name, in priority order."""
        result = HookResult(hook_name=name)

        # Copy: a handler may register or unregister while we iterate
        for hook in list(self._hooks.get(name, [])):
            try:
                result.results.append(await hook.handler(**kwargs))
            except Exception as e:
                result.errors.append((hook.source or str(hook.handler), e))
                logger.error(f"Hook {name} handler error: {e}")

        return result

    def clear(self, name: str | None = None) -> None:
        if name:
            self._hooks.pop(name, None)
        else:
            self._hooks.clear()
