"""Authentication clients and the client registry."""

from request_sentinel.clients.base import (
    Client,
    Credentials,
    DirectClient,
    IndirectClient,
    maybe_await,
)
from request_sentinel.clients.direct import BearerTokenClient, HeaderClient, ParameterClient
from request_sentinel.clients.indirect import RedirectClient
from request_sentinel.clients.jwt import JwtClient
from request_sentinel.clients.registry import Clients

__all__ = [
    "BearerTokenClient",
    "Client",
    "Clients",
    "Credentials",
    "DirectClient",
    "HeaderClient",
    "IndirectClient",
    "JwtClient",
    "ParameterClient",
    "RedirectClient",
    "maybe_await",
]
