"""Starlette integration: request context, action adapter and endpoint guards.

Two ways to secure a Starlette application:

* :func:`secure` decorates a single ``async def endpoint(request, profiles)``.
* :class:`SecurityMiddleware` is a pure ASGI middleware guarding every
  HTTP request; granted profiles are exposed as ``request.state.profiles``.

Session-scoped profiles need Starlette's ``SessionMiddleware`` installed
*outside* the security layer; without it profiles only live for the
current request.
"""

from __future__ import annotations

import functools
import logging
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Optional

from starlette.requests import Request
from starlette.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from request_sentinel.actions import ContentAction, HttpAction, OkAction, RedirectAction
from request_sentinel.clients.base import maybe_await
from request_sentinel.config.settings import Config
from request_sentinel.context import WebContext
from request_sentinel.engine.security import SecurityLogic
from request_sentinel.profile.models import ProfileSet
from request_sentinel.session.store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

PROFILES_STATE_KEY = "profiles"

Endpoint = Callable[[Request, ProfileSet], Awaitable[Response]]


class StarletteWebContext(WebContext):
    """:class:`WebContext` over a Starlette :class:`Request`."""

    def __init__(self, request: Request, session_store: Optional[SessionStore] = None) -> None:
        super().__init__(
            method=request.method,
            path=request.url.path,
            full_url=str(request.url),
            parameters=dict(request.query_params),
            headers=dict(request.headers),
            session_store=session_store or _session_store_for(request),
        )
        self.request = request

    @classmethod
    def from_request(cls, request: Request) -> StarletteWebContext:
        return cls(request)


def _session_store_for(request: Request) -> SessionStore:
    if "session" in request.scope:
        return InMemorySessionStore(request.session)
    logger.debug("No SessionMiddleware installed, profiles will not outlive the request")
    return InMemorySessionStore()


def _reason(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def starlette_action_adapter(action: HttpAction, context: WebContext) -> Response:
    """Convert an :class:`HttpAction` into a Starlette :class:`Response`."""
    headers = dict(action.headers)
    if isinstance(action, RedirectAction):
        return RedirectResponse(action.location, status_code=action.code, headers=headers)
    if isinstance(action, ContentAction):
        return HTMLResponse(action.body, status_code=action.code, headers=headers)
    if isinstance(action, OkAction):
        return Response(status_code=action.code, headers=headers)
    return PlainTextResponse(_reason(action.code), status_code=action.code, headers=headers)


def secure(
    config: Config,
    *,
    clients: Optional[str] = None,
    authorizers: Optional[str] = None,
    matchers: Optional[str] = None,
    multi_profile: Optional[bool] = None,
    logic: Optional[SecurityLogic] = None,
) -> Callable[[Endpoint], Callable[[Request], Awaitable[Response]]]:
    """Guard a Starlette endpoint with the security engine.

    The wrapped endpoint is called as ``endpoint(request, profiles)``;
    requests excluded by the matchers get an empty profile set.

    Usage::

        @secure(config, clients="bearer", authorizers="admins")
        async def admin_page(request, profiles):
            return JSONResponse({"user": next(iter(profiles.values())).id})
    """
    engine = logic or SecurityLogic()

    def decorator(endpoint: Endpoint) -> Callable[[Request], Awaitable[Response]]:
        @functools.wraps(endpoint)
        async def wrapper(request: Request) -> Response:
            context = StarletteWebContext.from_request(request)
            handled = False

            async def granted(ctx: WebContext, profiles: ProfileSet, parameters: dict) -> Any:
                nonlocal handled
                handled = True
                request.state.profiles = profiles
                return await maybe_await(endpoint(request, profiles))

            result = await engine.perform(
                context,
                config,
                granted,
                starlette_action_adapter,
                clients=clients,
                authorizers=authorizers,
                matchers=matchers,
                multi_profile=multi_profile,
            )
            if result is None and not handled:
                request.state.profiles = {}
                return await maybe_await(endpoint(request, {}))
            return result

        return wrapper

    return decorator


class SecurityMiddleware:
    """Pure ASGI middleware securing every HTTP request.

    Uses the ASGI interface directly (no ``BaseHTTPMiddleware``).

    Usage::

        app.add_middleware(SecurityMiddleware, config=config, clients="bearer")
        app.add_middleware(SessionMiddleware, secret_key="...")  # outermost
    """

    def __init__(
        self,
        app: ASGIApp,
        config: Config,
        clients: Optional[str] = None,
        authorizers: Optional[str] = None,
        matchers: Optional[str] = None,
        multi_profile: Optional[bool] = None,
        logic: Optional[SecurityLogic] = None,
    ) -> None:
        self.app = app
        self.config = config
        self.clients = clients
        self.authorizers = authorizers
        self.matchers = matchers
        self.multi_profile = multi_profile
        self.logic = logic or SecurityLogic()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        context = StarletteWebContext.from_request(request)
        granted_profiles: Optional[ProfileSet] = None

        def granted(ctx: WebContext, profiles: ProfileSet, parameters: dict) -> bool:
            nonlocal granted_profiles
            granted_profiles = profiles
            return True

        result = await self.logic.perform(
            context,
            self.config,
            granted,
            starlette_action_adapter,
            clients=self.clients,
            authorizers=self.authorizers,
            matchers=self.matchers,
            multi_profile=self.multi_profile,
        )

        if isinstance(result, Response):
            await result(scope, receive, send)
            return

        scope.setdefault("state", {})[PROFILES_STATE_KEY] = granted_profiles or {}
        await self.app(scope, receive, send)
