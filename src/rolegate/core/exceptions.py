"""
Error taxonomy.

Configuration errors are fatal and raised while building tables, resolvers
and engines. Authorization outcomes are never exceptions: the resolver
returns an AccessDecision for every call.
"""


class RolegateError(Exception):
    """Base class for all rolegate errors."""


class ConfigurationError(RolegateError):
    """Static configuration is inconsistent. Raised at load time."""


class UnauthenticatedAccessError(RolegateError):
    """A session or resolution was requested for an unauthenticated user."""


class SessionError(RolegateError):
    """Base class for session lifecycle errors."""


class SessionExpiredError(SessionError):
    """
    The session already expired.

    Expiry forces re-authentication; the idle timer cannot be reset
    transparently once it has run out.
    """


class SessionClosedError(SessionError):
    """The session was torn down (logout or forced expiry)."""
