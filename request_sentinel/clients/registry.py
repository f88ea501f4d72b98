"""Client registry: the ordered set of configured clients."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from request_sentinel.clients.base import Client, IndirectClient
from request_sentinel.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return name.strip().lower()


class Clients:
    """Ordered registry of clients with unique (case-insensitive) names.

    Parameters
    ----------
    clients:
        Clients in registration order.
    callback_url:
        Default callback URL given to indirect clients that have none.
    default_security_clients:
        Comma-separated client names used when a caller does not name
        any clients.
    """

    def __init__(
        self,
        *clients: Client,
        callback_url: Optional[str] = None,
        default_security_clients: Optional[str] = None,
    ) -> None:
        self.callback_url = callback_url
        self.default_security_clients = default_security_clients
        self._clients: Dict[str, Client] = {}
        for client in clients:
            self.add(client)

    def add(self, client: Client) -> None:
        """Register *client*; raises :class:`ConfigurationError` on a duplicate name."""
        if client is None:
            raise ConfigurationError("client cannot be None")
        key = _key(client.name)
        if key in self._clients:
            raise ConfigurationError(f"Duplicate client name: '{client.name}'")
        if (
            isinstance(client, IndirectClient)
            and client.callback_url is None
            and self.callback_url
        ):
            client.callback_url = self.callback_url
        self._clients[key] = client
        logger.debug("Client registered: %r", client)

    def find_client(self, name: str) -> Optional[Client]:
        if not name:
            return None
        return self._clients.get(_key(name))

    def find_all_clients(self) -> List[Client]:
        return list(self._clients.values())

    def __iter__(self) -> Iterator[Client]:
        return iter(list(self._clients.values()))

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._clients

    def __repr__(self) -> str:
        return f"Clients({', '.join(c.name for c in self._clients.values())})"
