"""Built-in direct clients.

* :class:`HeaderClient`: trusts an identity header set by a front proxy
* :class:`BearerTokenClient`: static bearer tokens (``Authorization``)
* :class:`ParameterClient`: static tokens passed as a request parameter
"""

from __future__ import annotations

import hmac
import logging
from abc import abstractmethod
from typing import Dict, List, Mapping, Optional, Union

from request_sentinel.actions import HttpAction, unauthorized
from request_sentinel.clients.base import Credentials, DirectClient
from request_sentinel.context import WebContext
from request_sentinel.errors import ConfigurationError, CredentialsError
from request_sentinel.profile.models import UserProfile

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


class HeaderClient(DirectClient):
    """Uses the value of *header* as the user id.

    Only safe behind a proxy that strips the header from client traffic.
    """

    def __init__(self, name: str, header: str = "X-User", roles_header: str = "") -> None:
        super().__init__(name)
        if not header:
            raise ConfigurationError("header cannot be blank")
        self.header = header
        self.roles_header = roles_header

    def fetch_credentials(self, context: WebContext) -> Optional[Credentials]:
        value = (context.get_request_header(self.header) or "").strip()
        if not value:
            return None
        extra: Dict[str, List[str]] = {}
        if self.roles_header:
            raw_roles = context.get_request_header(self.roles_header) or ""
            extra["roles"] = [r.strip() for r in raw_roles.split(",") if r.strip()]
        return Credentials(username=value, extra=extra)

    def build_profile(self, credentials: Credentials, context: WebContext) -> UserProfile:
        return UserProfile(
            id=credentials.username,
            roles=list(credentials.extra.get("roles", [])),
        )


class _StaticTokenClient(DirectClient):
    """Validates a token against a static ``{token: user_id}`` mapping."""

    def __init__(
        self,
        name: str,
        tokens: Mapping[str, str],
        roles: Optional[Mapping[str, List[str]]] = None,
        challenge: bool = False,
        realm: str = "sentinel",
    ) -> None:
        super().__init__(name)
        if not tokens:
            raise ConfigurationError(f"client '{name}' requires at least one token")
        self._tokens = dict(tokens)
        self._roles = {user: list(r) for user, r in (roles or {}).items()}
        self.challenge = challenge
        self.realm = realm

    @abstractmethod
    def _extract_token(self, context: WebContext) -> Optional[str]:
        """Return the raw token carried by the request, if any."""

    def _validate(self, token: str) -> str:
        # Constant-time comparison against every configured token
        user_id: Optional[str] = None
        for expected, user in self._tokens.items():
            if hmac.compare_digest(token, expected):
                user_id = user
        if user_id is None:
            raise CredentialsError("unknown token", client_name=self.name)
        return user_id

    def fetch_credentials(self, context: WebContext) -> Union[Credentials, HttpAction, None]:
        token = self._extract_token(context)
        if not token:
            return None
        try:
            user_id = self._validate(token)
        except CredentialsError as exc:
            logger.info("%s for %s", exc, context.path)
            if self.challenge:
                return unauthorized({"WWW-Authenticate": f'Bearer realm="{self.realm}"'})
            return None
        return Credentials(token=token, username=user_id)

    def build_profile(self, credentials: Credentials, context: WebContext) -> UserProfile:
        return UserProfile(
            id=credentials.username,
            roles=list(self._roles.get(credentials.username, [])),
        )


class BearerTokenClient(_StaticTokenClient):
    """Reads ``Authorization: Bearer <token>``.

    With ``challenge=True`` an invalid token stops the pipeline with a
    401 carrying ``WWW-Authenticate``; otherwise the next client is tried.
    """

    def _extract_token(self, context: WebContext) -> Optional[str]:
        header = context.get_request_header("Authorization") or ""
        if not header.lower().startswith(_BEARER_PREFIX):
            return None
        return header[len(_BEARER_PREFIX):].strip() or None


class ParameterClient(_StaticTokenClient):
    """Reads the token from the *parameter* request parameter."""

    def __init__(self, name: str, tokens: Mapping[str, str], parameter: str = "token", **kwargs) -> None:
        super().__init__(name, tokens, **kwargs)
        self.parameter = parameter

    def _extract_token(self, context: WebContext) -> Optional[str]:
        return (context.get_request_parameter(self.parameter) or "").strip() or None
