"""Session stores backing the session-scoped profile storage.

A store is a small key–value view over whatever session mechanism the
host uses.  Values written by the engine are always JSON-compatible
(profiles are stored as plain dicts) so cookie-backed sessions such as
Starlette's ``SessionMiddleware`` work unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, MutableMapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    """Key–value access to the current user's session."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemorySessionStore:
    """Session store over a plain mutable mapping.

    Passing an existing mapping (for instance ``request.session``) makes
    the store a thin view over it; otherwise a private dict is used.
    """

    def __init__(self, data: Optional[MutableMapping[str, Any]] = None) -> None:
        self._data: MutableMapping[str, Any] = data if data is not None else {}

    @property
    def data(self) -> MutableMapping[str, Any]:
        return self._data

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def snapshot(self) -> Dict[str, Any]:
        """Return a shallow copy of the stored data."""
        return dict(self._data)
