"""
Request Sentinel - a per-request security decision engine.

Given an incoming request, Request Sentinel decides whether the caller
is authenticated (through pluggable direct and indirect clients),
whether the resulting profiles are authorized, and which HTTP action to
answer with otherwise.
"""

from request_sentinel.actions import (
    ContentAction,
    HttpAction,
    OkAction,
    RedirectAction,
    StatusAction,
)
from request_sentinel.clients import Clients, Credentials, DirectClient, IndirectClient
from request_sentinel.config.settings import Config
from request_sentinel.constants import SERVER_NAME, SERVER_VERSION
from request_sentinel.context import WebContext
from request_sentinel.engine import SecurityClientFinder, SecurityLogic, perform
from request_sentinel.errors import ConfigurationError, SentinelBaseError
from request_sentinel.profile import ProfileManager, ProfileSet, UserProfile

__version__ = SERVER_VERSION
__app_name__ = SERVER_NAME

__all__ = [
    "Clients",
    "Config",
    "ConfigurationError",
    "ContentAction",
    "Credentials",
    "DirectClient",
    "HttpAction",
    "IndirectClient",
    "OkAction",
    "ProfileManager",
    "ProfileSet",
    "RedirectAction",
    "SecurityClientFinder",
    "SecurityLogic",
    "SentinelBaseError",
    "StatusAction",
    "UserProfile",
    "WebContext",
    "__app_name__",
    "__version__",
    "perform",
]
