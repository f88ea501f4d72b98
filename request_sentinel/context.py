"""Per-request web context handed to every security collaborator.

The context is the engine's only view of the HTTP request: method,
path, full URL, parameters and headers, plus two scratch areas:

* ``request attributes``: live for the current invocation only
* ``session_store``: survives across requests of the same session
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from request_sentinel.constants import (
    AJAX_HEADER,
    AJAX_HEADER_VALUE,
    AJAX_PARAMETER,
    LOAD_PROFILES_FROM_SESSION,
)
from request_sentinel.session.store import InMemorySessionStore, SessionStore

_MISSING = object()


class WebContext:
    """Framework-neutral request view.

    Header lookups are case-insensitive; parameter lookups are not.
    Hosts normally build one through an integration (see
    :mod:`request_sentinel.integrations.starlette`); tests build it
    directly::

        ctx = WebContext(path="/api/items", headers={"Authorization": "Bearer t"})
    """

    def __init__(
        self,
        *,
        method: str = "GET",
        path: str = "/",
        full_url: Optional[str] = None,
        parameters: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        session_store: Optional[SessionStore] = None,
    ) -> None:
        self.method = method.upper()
        self.path = path
        self.full_url = full_url or f"http://localhost{path}"
        self._parameters: Dict[str, str] = dict(parameters or {})
        self._headers: Dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}
        self._attributes: Dict[str, Any] = {}
        self.session_store: SessionStore = (
            session_store if session_store is not None else InMemorySessionStore()
        )

    # ── Request data ─────────────────────────────────────────────────

    def get_request_parameter(self, name: str) -> Optional[str]:
        return self._parameters.get(name)

    def add_request_parameter(self, name: str, value: str) -> None:
        self._parameters[name] = value

    def get_request_header(self, name: str) -> Optional[str]:
        return self._headers.get(name.lower())

    def add_request_header(self, name: str, value: str) -> None:
        self._headers[name.lower()] = value

    @property
    def parameters(self) -> Dict[str, str]:
        return dict(self._parameters)

    # ── Request attributes ───────────────────────────────────────────

    def get_request_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def set_request_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value

    def has_request_attribute(self, name: str) -> bool:
        return self._attributes.get(name, _MISSING) is not _MISSING

    @property
    def loaded_from_session(self) -> Optional[bool]:
        """Whether the current profiles were read from the session.

        ``None`` until the profile store has been read in this invocation.
        """
        return self._attributes.get(LOAD_PROFILES_FROM_SESSION)

    @property
    def is_ajax(self) -> bool:
        if (self.get_request_parameter(AJAX_PARAMETER) or "").lower() == "true":
            return True
        return self.get_request_header(AJAX_HEADER) == AJAX_HEADER_VALUE

    def __repr__(self) -> str:
        return f"{type(self).__name__}(method={self.method!r}, path={self.path!r})"
