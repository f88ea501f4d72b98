"""Custom exception classes for Request Sentinel."""

from typing import Optional


class SentinelBaseError(Exception):
    """Base class for all custom exceptions in Request Sentinel."""

    pass


class ConfigurationError(SentinelBaseError):
    """Raised when the security configuration is missing or invalid.

    Covers missing collaborators, unknown client / authorizer / matcher
    names, duplicate client names and configuration files that fail to
    load or validate.  Never request-dependent, never retried.
    """

    pass


class CredentialsError(SentinelBaseError):
    """
    Raised by a client when credentials were found on the request
    but could not be validated.
    """

    def __init__(self, message: str, client_name: Optional[str] = None):
        self.client_name = client_name

        full_msg = "Invalid credentials"
        if client_name:
            full_msg += f" (client: {client_name})"
        full_msg += f": {message}"
        super().__init__(full_msg)
