"""Client finder: resolves the clients applying to one invocation."""

from __future__ import annotations

import logging
from typing import List, Optional

from request_sentinel.clients.base import Client
from request_sentinel.clients.registry import Clients
from request_sentinel.constants import DEFAULT_CLIENT_NAME_PARAMETER
from request_sentinel.context import WebContext
from request_sentinel.errors import ConfigurationError
from request_sentinel.utils import split_names

logger = logging.getLogger(__name__)


class SecurityClientFinder:
    """Turns a comma-separated name list into an ordered client list.

    Resolution order for the names:

    1. the names passed by the caller;
    2. else the registry's ``default_security_clients``;
    3. else every registered client, in registration order.

    When the request carries *client_name_parameter*, the result is
    narrowed to that one client if it was resolved, and emptied if not.
    """

    def __init__(self, client_name_parameter: str = DEFAULT_CLIENT_NAME_PARAMETER) -> None:
        self.client_name_parameter = client_name_parameter

    def find(
        self,
        clients: Clients,
        context: WebContext,
        client_names: Optional[str],
    ) -> List[Client]:
        resolved = self.resolve(clients, client_names)

        forced = (context.get_request_parameter(self.client_name_parameter) or "").strip()
        if not forced:
            return resolved

        for client in resolved:
            if client.name.lower() == forced.lower():
                logger.debug("Client '%s' forced by request parameter", client.name)
                return [client]
        logger.debug(
            "Forced client '%s' is not among the resolved clients %s",
            forced,
            [c.name for c in resolved],
        )
        return []

    def resolve(self, clients: Clients, client_names: Optional[str]) -> List[Client]:
        """Resolve names without looking at the request."""
        if clients is None or len(clients) == 0:
            raise ConfigurationError("No client registered in the security configuration")

        names = split_names(client_names) or split_names(clients.default_security_clients)
        if not names:
            return clients.find_all_clients()

        result: List[Client] = []
        for name in names:
            client = clients.find_client(name)
            if client is None:
                raise ConfigurationError(f"The client '{name}' must be defined in the security configuration")
            if client not in result:
                result.append(client)
        return result
