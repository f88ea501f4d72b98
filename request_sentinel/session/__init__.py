"""Session store abstractions."""

from request_sentinel.session.store import InMemorySessionStore, SessionStore

__all__ = ["InMemorySessionStore", "SessionStore"]
