"""Tests for matchers, authorizers and their checkers."""

from __future__ import annotations

import asyncio

import pytest

from request_sentinel.actions import StatusAction, status
from request_sentinel.authz import (
    AuthorizationChecker,
    FunctionAuthorizer,
    IsAuthenticatedAuthorizer,
    ProfileIdAuthorizer,
    RequireAllRolesAuthorizer,
    RequireAnyRoleAuthorizer,
)
from request_sentinel.context import WebContext
from request_sentinel.errors import ConfigurationError
from request_sentinel.matching import (
    FunctionMatcher,
    HeaderMatcher,
    HttpMethodMatcher,
    MatchingChecker,
    PathMatcher,
)
from request_sentinel.profile import UserProfile


def _profiles(*specs):
    return {f"c{i}": UserProfile(id=pid, roles=list(roles)) for i, (pid, roles) in enumerate(specs)}


# ═══════════════════════════════════════════════════════════════════════
# Matchers
# ═══════════════════════════════════════════════════════════════════════


class TestPathMatcher:
    def test_default_matches_everything(self) -> None:
        assert PathMatcher().matches(WebContext(path="/anything/at/all"))

    def test_includes(self) -> None:
        m = PathMatcher(includes=["/api/*"])
        assert m.matches(WebContext(path="/api/items"))
        assert not m.matches(WebContext(path="/static/app.js"))

    def test_excludes_win(self) -> None:
        m = PathMatcher(includes=["/api/*"], excludes=["/api/health"])
        assert not m.matches(WebContext(path="/api/health"))
        assert m.matches(WebContext(path="/api/healthz"))


class TestOtherMatchers:
    def test_method(self) -> None:
        m = HttpMethodMatcher(["post", "PUT"])
        assert m.matches(WebContext(method="POST"))
        assert not m.matches(WebContext(method="GET"))

    def test_method_requires_values(self) -> None:
        with pytest.raises(ConfigurationError):
            HttpMethodMatcher([])

    def test_header_presence(self) -> None:
        m = HeaderMatcher("X-Api")
        assert m.matches(WebContext(headers={"x-api": ""}))
        assert not m.matches(WebContext())

    def test_header_pattern(self) -> None:
        m = HeaderMatcher("Accept", r"application/json.*")
        assert m.matches(WebContext(headers={"Accept": "application/json; charset=utf-8"}))
        assert not m.matches(WebContext(headers={"Accept": "text/html"}))

    def test_function(self) -> None:
        m = FunctionMatcher(lambda ctx: ctx.path.startswith("/admin"))
        assert m.matches(WebContext(path="/admin/users"))


class TestMatchingChecker:
    def _run(self, names, matchers, ctx=None):
        return asyncio.run(MatchingChecker().matches(ctx or WebContext(), names, matchers))

    def test_no_names(self) -> None:
        assert self._run(None, {}) is True
        assert self._run("", {}) is True

    def test_all_must_match(self) -> None:
        matchers = {"yes": lambda ctx: True, "no": FunctionMatcher(lambda ctx: False)}
        assert self._run("yes", matchers) is True
        assert self._run("yes,no", matchers) is False

    def test_async_matcher(self) -> None:
        async def api_only(ctx: WebContext) -> bool:
            return ctx.path.startswith("/api")

        assert self._run("api", {"api": api_only}, WebContext(path="/api/x")) is True
        assert self._run("api", {"api": api_only}, WebContext(path="/x")) is False

    def test_case_insensitive_names(self) -> None:
        assert self._run("ALWAYS", {"always": lambda ctx: True}) is True

    def test_unknown_name(self) -> None:
        with pytest.raises(ConfigurationError, match="matcher 'missing'"):
            self._run("missing", {})


# ═══════════════════════════════════════════════════════════════════════
# Authorizers
# ═══════════════════════════════════════════════════════════════════════


class TestAuthorizers:
    def test_is_authenticated(self) -> None:
        a = IsAuthenticatedAuthorizer()
        assert a.check(WebContext(), _profiles(("alice", []))) is True
        assert a.check(WebContext(), {}) is False

    def test_any_role(self) -> None:
        a = RequireAnyRoleAuthorizer(["admin", "ops"])
        assert a.check(WebContext(), _profiles(("alice", ["dev"]), ("bob", ["ops"])))
        assert not a.check(WebContext(), _profiles(("alice", ["dev"])))

    def test_all_roles_within_one_profile(self) -> None:
        a = RequireAllRolesAuthorizer(["admin", "ops"])
        assert a.check(WebContext(), _profiles(("alice", ["admin", "ops", "dev"])))
        assert not a.check(WebContext(), _profiles(("alice", ["admin"]), ("bob", ["ops"])))

    def test_role_authorizers_require_roles(self) -> None:
        with pytest.raises(ConfigurationError):
            RequireAnyRoleAuthorizer([])
        with pytest.raises(ConfigurationError):
            RequireAllRolesAuthorizer([])

    def test_profile_id(self) -> None:
        a = ProfileIdAuthorizer(["alice"])
        assert a.check(WebContext(), _profiles(("alice", [])))
        assert not a.check(WebContext(), _profiles(("bob", [])))

    def test_function(self) -> None:
        a = FunctionAuthorizer(lambda ctx, profiles: len(profiles) == 2)
        assert a.check(WebContext(), _profiles(("a", []), ("b", [])))


class TestAuthorizationChecker:
    def _run(self, names, authorizers, profiles=None):
        return asyncio.run(
            AuthorizationChecker().is_authorized(
                WebContext(), profiles or _profiles(("alice", ["admin"])), names, authorizers
            )
        )

    def test_no_names_allows(self) -> None:
        assert self._run(None, {}) is True

    def test_builtin_authenticated(self) -> None:
        assert self._run("authenticated", {}) is True

    def test_first_deny_wins(self) -> None:
        calls = []

        def later(ctx, profiles):
            calls.append("later")
            return True

        authorizers = {"admins": RequireAnyRoleAuthorizer(["admin"]), "ops": RequireAnyRoleAuthorizer(["ops"]), "later": later}
        assert self._run("admins,ops,later", authorizers) is False
        assert calls == []
        assert self._run("admins,later", authorizers) is True
        assert calls == ["later"]

    def test_action_returned(self) -> None:
        result = self._run("teapot", {"teapot": lambda ctx, profiles: status(418)})
        assert result == StatusAction(418)

    def test_async_authorizer(self) -> None:
        class Remote:
            async def check(self, ctx, profiles):
                await asyncio.sleep(0)
                return "alice" in {p.id for p in profiles.values()}

        assert self._run("remote", {"remote": Remote()}) is True

    def test_configured_name_overrides_builtin(self) -> None:
        assert self._run("authenticated", {"authenticated": lambda ctx, p: False}) is False

    def test_unknown_name(self) -> None:
        with pytest.raises(ConfigurationError, match="authorizer 'ghost'"):
            self._run("ghost", {})
