"""Built-in indirect client: redirect to an external login page."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from request_sentinel.actions import HttpAction, redirect
from request_sentinel.clients.base import Credentials, IndirectClient, maybe_await
from request_sentinel.context import WebContext
from request_sentinel.profile.models import UserProfile

logger = logging.getLogger(__name__)


class RedirectClient(IndirectClient):
    """Sends unauthenticated users to *login_url*.

    The redirect carries ``client_name`` and, when known, ``callback``
    query parameters.

    The security engine only ever asks this client for its redirect.  The
    return leg belongs to the host: its callback endpoint calls
    :meth:`fetch_credentials` (the provider's ``code`` parameter) and
    :meth:`build_profile`, which hands the credentials to *authenticator*
    (sync or async, ``Credentials -> UserProfile | None``), then saves the
    profile with ``ProfileManager.save(..., to_session=True)``.  Later
    requests find it through the session.
    """

    def __init__(
        self,
        name: str,
        login_url: Optional[str] = None,
        callback_url: Optional[str] = None,
        authenticator: Optional[Callable[[Credentials], Any]] = None,
        code_parameter: str = "code",
    ) -> None:
        super().__init__(name, callback_url=callback_url)
        self.login_url = login_url
        self.authenticator = authenticator
        self.code_parameter = code_parameter

    def get_redirection_action(self, context: WebContext) -> Optional[HttpAction]:
        if not self.login_url:
            logger.debug("Client '%s' has no login URL configured", self.name)
            return None
        query = {"client_name": self.name}
        if self.callback_url:
            query["callback"] = self.callback_url
        parts = urlsplit(self.login_url)
        merged = f"{parts.query}&{urlencode(query)}" if parts.query else urlencode(query)
        return redirect(urlunsplit(parts._replace(query=merged)))

    def fetch_credentials(self, context: WebContext) -> Optional[Credentials]:
        code = (context.get_request_parameter(self.code_parameter) or "").strip()
        if not code:
            return None
        return Credentials(token=code)

    async def build_profile(
        self, credentials: Credentials, context: WebContext
    ) -> Optional[UserProfile]:
        if self.authenticator is None:
            return None
        return await maybe_await(self.authenticator(credentials))
