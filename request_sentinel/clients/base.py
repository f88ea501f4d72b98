"""Client contract — pluggable authentication mechanisms.

A client is either **direct** (credentials are read and validated on
the current request, never redirects) or **indirect** (the user is sent
to an external identity provider and comes back through a callback).

Every client method may be sync or async; the engine awaits results
through :func:`maybe_await`.  A method signals a required HTTP action by
*returning* an :class:`~request_sentinel.actions.HttpAction`.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Optional, Union

from request_sentinel.actions import HttpAction
from request_sentinel.context import WebContext
from request_sentinel.errors import ConfigurationError
from request_sentinel.profile.models import UserProfile

CredentialsResult = Union["Credentials", HttpAction, None]
ProfileResult = Union[UserProfile, HttpAction, None]


async def maybe_await(value: Any) -> Any:
    """Await *value* when it is awaitable, return it unchanged otherwise."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class Credentials:
    """Credentials extracted from a request.

    Attributes:
        token: Opaque token (bearer token, JWT, authorization code).
        username: User name when the mechanism carries one.
        extra: Mechanism-specific data (decoded claims, ...).
    """

    token: str = ""
    username: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


class Client(ABC):
    """Base class of all clients.  *name* must be unique in a registry."""

    indirect: bool = False

    def __init__(self, name: str) -> None:
        if not name or not name.strip():
            raise ConfigurationError("client name cannot be blank")
        self._name = name.strip()

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_indirect(self) -> bool:
        return self.indirect

    @abstractmethod
    def fetch_credentials(
        self, context: WebContext
    ) -> Union[CredentialsResult, Awaitable[CredentialsResult]]:
        """Extract and validate credentials from *context*.

        Returns :class:`Credentials`, an :class:`HttpAction` to stop the
        pipeline, or ``None`` when the request carries no usable
        credentials for this client.
        """

    @abstractmethod
    def build_profile(
        self, credentials: Credentials, context: WebContext
    ) -> Union[ProfileResult, Awaitable[ProfileResult]]:
        """Turn validated *credentials* into a :class:`UserProfile`."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"


class DirectClient(Client):
    """Stateless client authenticating within the current request."""

    indirect = False


class IndirectClient(Client):
    """Client authenticating through a redirect round-trip.

    The callback leg stores the resulting profile in the session; the
    security engine only asks for :meth:`get_redirection_action` when no
    usable profile is present yet.
    """

    indirect = True

    def __init__(self, name: str, callback_url: Optional[str] = None) -> None:
        super().__init__(name)
        self.callback_url = callback_url

    @abstractmethod
    def get_redirection_action(
        self, context: WebContext
    ) -> Union[Optional[HttpAction], Awaitable[Optional[HttpAction]]]:
        """Return the action starting authentication (normally a redirect).

        ``None`` means the client cannot start authentication for this
        request; the engine answers 401 instead.
        """
