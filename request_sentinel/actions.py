"""HTTP actions, the only outcomes the security engine hands to the host.

Every action carries an HTTP status ``code`` and optional extra
``headers``.  Concrete variants:

* :class:`OkAction`: plain 200
* :class:`RedirectAction`: 302 to ``location``
* :class:`ContentAction`: render ``body`` with ``code``
* :class:`StatusAction`: bare status (401, 403, custom)

Clients and authorizers *return* an action to short-circuit the
pipeline; nothing is raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

UNAUTHORIZED = 401
FORBIDDEN = 403
FOUND = 302
OK = 200


@dataclass(frozen=True)
class HttpAction:
    """Base class for all HTTP actions."""

    code: int
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StatusAction(HttpAction):
    """Terminal HTTP status without a body."""


@dataclass(frozen=True)
class OkAction(HttpAction):
    code: int = OK


@dataclass(frozen=True)
class RedirectAction(HttpAction):
    code: int = FOUND
    location: str = ""


@dataclass(frozen=True)
class ContentAction(HttpAction):
    code: int = OK
    body: str = ""


def ok() -> OkAction:
    return OkAction()


def redirect(location: str) -> RedirectAction:
    return RedirectAction(location=location)


def content(body: str, code: int = OK) -> ContentAction:
    return ContentAction(code=code, body=body)


def status(code: int, headers: Optional[Dict[str, str]] = None) -> StatusAction:
    return StatusAction(code=code, headers=dict(headers or {}))


def unauthorized(headers: Optional[Dict[str, str]] = None) -> StatusAction:
    """401: no usable identity."""
    return status(UNAUTHORIZED, headers)


def forbidden() -> StatusAction:
    """403: identity known but not authorized."""
    return status(FORBIDDEN)
