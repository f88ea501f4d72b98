"""Security logic — the per-request authentication/authorization decision.

Flow of :meth:`SecurityLogic.perform`::

    matchers ─no─▶ (nothing, return None)
       │yes
    client finder ─▶ direct clients ─▶ session profiles ─▶ authorizers
                                                             │
                         granted adapter ◀─allowed───────────┤
                         action adapter  ◀─401/403/redirect──┘

Direct clients are tried in order on the current request (first success
wins, or every success accumulates in multi-profile mode).  The session
is consulted only when the direct clients produced nothing and an
indirect client is involved (or no client at all).  A client or
authorizer returning an :class:`HttpAction` ends the pipeline with that
action.

Usage::

    logic = SecurityLogic()
    result = await logic.perform(
        context, config, granted, action_adapter,
        clients="bearer,login", authorizers="admins",
    )
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from request_sentinel.actions import HttpAction, RedirectAction, forbidden, unauthorized
from request_sentinel.authz.checker import AuthorizationChecker
from request_sentinel.clients.base import Client, maybe_await
from request_sentinel.config.settings import Config
from request_sentinel.constants import REQUESTED_URL, SECURITY_SPAN_NAME
from request_sentinel.context import WebContext
from request_sentinel.engine.finder import SecurityClientFinder
from request_sentinel.errors import ConfigurationError
from request_sentinel.matching.checker import MatchingChecker
from request_sentinel.profile.manager import ProfileManager
from request_sentinel.profile.models import ProfileSet
from request_sentinel.telemetry.tracing import start_span

logger = logging.getLogger(__name__)

GrantedAdapter = Callable[[WebContext, ProfileSet, Dict[str, Any]], Any]
HttpActionAdapter = Callable[[HttpAction, WebContext], Any]


def _require(value: Any, name: str) -> None:
    if value is None:
        raise ConfigurationError(f"{name} cannot be None")


class SecurityLogic:
    """Orchestrates matchers, clients, profile store and authorizers.

    Parameters
    ----------
    client_finder, authorization_checker, matching_checker:
        Collaborators; defaults are created when omitted.
    save_profile_in_session:
        Also persist profiles from direct clients in the session.
    """

    def __init__(
        self,
        client_finder: Optional[SecurityClientFinder] = None,
        authorization_checker: Optional[AuthorizationChecker] = None,
        matching_checker: Optional[MatchingChecker] = None,
        save_profile_in_session: bool = False,
    ) -> None:
        self.client_finder = client_finder or SecurityClientFinder()
        self.authorization_checker = authorization_checker or AuthorizationChecker()
        self.matching_checker = matching_checker or MatchingChecker()
        self.save_profile_in_session = save_profile_in_session

    async def perform(
        self,
        context: WebContext,
        config: Config,
        granted_adapter: GrantedAdapter,
        http_action_adapter: HttpActionAdapter,
        clients: Optional[str] = None,
        authorizers: Optional[str] = None,
        matchers: Optional[str] = None,
        multi_profile: Optional[bool] = None,
        **parameters: Any,
    ) -> Any:
        """Secure one request.

        Returns the granted adapter's result when access is allowed, the
        action adapter's result when an :class:`HttpAction` is produced,
        and ``None`` when the matchers exclude the request.

        Raises:
            ConfigurationError: A collaborator is missing or a name is
                unknown.  Nothing has been written to the session then.
        """
        logger.debug("=== SECURITY ===")
        _require(context, "context")
        _require(config, "config")
        _require(http_action_adapter, "http_action_adapter")
        _require(granted_adapter, "granted_adapter")
        _require(config.clients, "clients")
        _require(self.client_finder, "client_finder")
        _require(self.authorization_checker, "authorization_checker")
        _require(self.matching_checker, "matching_checker")
        if authorizers is None:
            authorizers = config.default_authorizers
        if matchers is None:
            matchers = config.default_matchers
        multi = config.multi_profile if multi_profile is None else bool(multi_profile)

        with start_span(SECURITY_SPAN_NAME, {"sentinel.clients": clients or ""}) as span:
            if not await self.matching_checker.matches(context, matchers, config.matchers):
                logger.debug("No matching for %s %s, skipping security", context.method, context.path)
                span.set_attribute("sentinel.outcome", "skipped")
                return None

            current_clients = self.client_finder.find(config.clients, context, clients)
            logger.debug("current clients: %s", [c.name for c in current_clients])

            manager = ProfileManager(context)
            outcome = await self._authenticate(context, manager, current_clients, multi)

            if isinstance(outcome, HttpAction):
                action = outcome
            elif outcome:
                profiles = outcome
                logger.debug("profiles: %s", [p.id for p in profiles.values()])
                decision = await self.authorization_checker.is_authorized(
                    context, profiles, authorizers, config.authorizers
                )
                if decision is True:
                    to_session = bool(context.loaded_from_session) or self.save_profile_in_session
                    manager.save(profiles, to_session=to_session, multi_profile=multi)
                    logger.debug("Access granted to %s", context.path)
                    span.set_attribute("sentinel.outcome", "granted")
                    return await maybe_await(granted_adapter(context, profiles, parameters))
                action = forbidden() if decision is False else decision
            else:
                action = await self._missing_authentication(context, current_clients)

            logger.debug("Security action for %s: %r", context.path, action)
            span.set_attribute("sentinel.outcome", "action")
            span.set_attribute("sentinel.status", action.code)
            return await maybe_await(http_action_adapter(action, context))

    async def _authenticate(
        self,
        context: WebContext,
        manager: ProfileManager,
        current_clients: List[Client],
        multi_profile: bool,
    ) -> Union[ProfileSet, HttpAction]:
        """Return the usable profiles, or the action a client required."""
        profiles = manager.load_from_request()
        direct = [c for c in current_clients if not c.is_indirect]
        has_indirect = len(direct) < len(current_clients)

        if not profiles and direct:
            outcome = await self._authenticate_direct(context, direct, multi_profile)
            if isinstance(outcome, HttpAction):
                return outcome
            profiles = outcome

        # Session profiles never mix with fresh direct ones
        if not profiles and (has_indirect or not current_clients):
            profiles = manager.load()
        return profiles

    async def _authenticate_direct(
        self,
        context: WebContext,
        direct_clients: List[Client],
        multi_profile: bool,
    ) -> Union[ProfileSet, HttpAction]:
        profiles: ProfileSet = {}
        for client in direct_clients:
            credentials = await maybe_await(client.fetch_credentials(context))
            if isinstance(credentials, HttpAction):
                logger.debug("Client '%s' requires HTTP action %d", client.name, credentials.code)
                return credentials
            if credentials is None:
                logger.debug("No credentials for client '%s'", client.name)
                continue

            profile = await maybe_await(client.build_profile(credentials, context))
            if isinstance(profile, HttpAction):
                logger.debug("Client '%s' requires HTTP action %d", client.name, profile.code)
                return profile
            if profile is None:
                logger.debug("No profile built by client '%s'", client.name)
                continue

            profile.client_name = client.name
            profiles[client.name] = profile
            logger.debug("Client '%s' authenticated '%s'", client.name, profile.id)
            if not multi_profile:
                break
        return profiles

    async def _missing_authentication(
        self,
        context: WebContext,
        current_clients: List[Client],
    ) -> HttpAction:
        """Start an indirect authentication, or answer 401."""
        indirect: Any = next((c for c in current_clients if c.is_indirect), None)
        if indirect is None:
            return unauthorized()
        if context.is_ajax:
            logger.debug("AJAX request to %s: 401 instead of redirecting", context.path)
            return unauthorized()

        action: Optional[HttpAction] = await maybe_await(indirect.get_redirection_action(context))
        if action is None:
            logger.debug("Client '%s' cannot start authentication", indirect.name)
            return unauthorized()
        if isinstance(action, RedirectAction):
            context.session_store.set(REQUESTED_URL, context.full_url)
            logger.debug("Redirecting to identity provider of client '%s'", indirect.name)
        return action


async def perform(
    context: WebContext,
    config: Config,
    granted_adapter: GrantedAdapter,
    http_action_adapter: HttpActionAdapter,
    **kwargs: Any,
) -> Any:
    """Run :meth:`SecurityLogic.perform` with default collaborators."""
    return await SecurityLogic().perform(
        context, config, granted_adapter, http_action_adapter, **kwargs
    )
