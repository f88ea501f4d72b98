"""Runtime security configuration handed to the engine."""

from __future__ import annotations

from typing import Any, Dict, Optional

from request_sentinel.clients.registry import Clients


class Config:
    """Holds the client registry plus the named authorizers and matchers.

    ``default_authorizers``, ``default_matchers`` and ``multi_profile``
    are used by :meth:`SecurityLogic.perform` when the caller passes
    ``None`` for the matching argument.  An explicit empty string still
    means "none".

    Usage::

        config = Config(Clients(BearerTokenClient("bearer", {"t": "alice"})))
        config.add_authorizer("admins", RequireAnyRoleAuthorizer(["admin"]))
    """

    def __init__(
        self,
        clients: Optional[Clients] = None,
        authorizers: Optional[Dict[str, Any]] = None,
        matchers: Optional[Dict[str, Any]] = None,
        default_authorizers: Optional[str] = None,
        default_matchers: Optional[str] = None,
        multi_profile: bool = False,
    ) -> None:
        self.clients = clients if clients is not None else Clients()
        self.authorizers: Dict[str, Any] = dict(authorizers or {})
        self.matchers: Dict[str, Any] = dict(matchers or {})
        self.default_authorizers = default_authorizers
        self.default_matchers = default_matchers
        self.multi_profile = multi_profile

    def add_authorizer(self, name: str, authorizer: Any) -> None:
        self.authorizers[name] = authorizer

    def add_matcher(self, name: str, matcher: Any) -> None:
        self.matchers[name] = matcher

    def __repr__(self) -> str:
        return (
            f"Config(clients={self.clients!r}, authorizers={sorted(self.authorizers)}, "
            f"matchers={sorted(self.matchers)})"
        )
