"""Built-in authorizers.

An authorizer is any object with ``check(context, profiles)`` (sync or
async), or a plain callable with that signature.  It returns ``True``
(allowed), ``False`` (denied → 403) or an
:class:`~request_sentinel.actions.HttpAction` to answer with directly.

Role and id checks pass when *any* profile of the set satisfies them.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Protocol, Union, runtime_checkable

from request_sentinel.actions import HttpAction
from request_sentinel.context import WebContext
from request_sentinel.errors import ConfigurationError
from request_sentinel.profile.models import ProfileSet

AuthorizationResult = Union[bool, HttpAction]


@runtime_checkable
class Authorizer(Protocol):
    def check(self, context: WebContext, profiles: ProfileSet) -> Any: ...


class IsAuthenticatedAuthorizer:
    """Allows any request carrying at least one profile."""

    def check(self, context: WebContext, profiles: ProfileSet) -> bool:
        return bool(profiles)


class RequireAnyRoleAuthorizer:
    """Allows profiles holding at least one of *roles*."""

    def __init__(self, roles: Iterable[str]) -> None:
        self.roles = set(roles)
        if not self.roles:
            raise ConfigurationError("RequireAnyRoleAuthorizer requires at least one role")

    def check(self, context: WebContext, profiles: ProfileSet) -> bool:
        return any(self.roles.intersection(p.roles) for p in profiles.values())


class RequireAllRolesAuthorizer:
    """Allows profiles holding every one of *roles*."""

    def __init__(self, roles: Iterable[str]) -> None:
        self.roles = set(roles)
        if not self.roles:
            raise ConfigurationError("RequireAllRolesAuthorizer requires at least one role")

    def check(self, context: WebContext, profiles: ProfileSet) -> bool:
        return any(self.roles.issubset(p.roles) for p in profiles.values())


class ProfileIdAuthorizer:
    """Allows profiles whose id is one of *ids*."""

    def __init__(self, ids: Iterable[str]) -> None:
        self.ids = set(ids)

    def check(self, context: WebContext, profiles: ProfileSet) -> bool:
        return any(p.id in self.ids for p in profiles.values())


class FunctionAuthorizer:
    """Adapts a ``(context, profiles) -> bool | HttpAction`` callable."""

    def __init__(self, fn: Callable[[WebContext, ProfileSet], Any]) -> None:
        self._fn = fn

    def check(self, context: WebContext, profiles: ProfileSet) -> Any:
        return self._fn(context, profiles)


DEFAULT_AUTHORIZERS = {
    "authenticated": IsAuthenticatedAuthorizer(),
}
"""Authorizers available under a reserved name without configuration."""
