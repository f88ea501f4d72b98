"""Tests for user profiles, the profile store and the session store."""

from __future__ import annotations

import time

from request_sentinel.constants import LOAD_PROFILES_FROM_SESSION, USER_PROFILES
from request_sentinel.context import WebContext
from request_sentinel.profile import ProfileManager, UserProfile
from request_sentinel.session import InMemorySessionStore

# ═══════════════════════════════════════════════════════════════════════
# UserProfile
# ═══════════════════════════════════════════════════════════════════════


class TestUserProfile:
    def test_defaults(self) -> None:
        p = UserProfile(id="alice")
        assert p.attributes == {}
        assert p.roles == []
        assert p.client_name == ""
        assert p.expires_at is None
        assert p.is_expired() is False

    def test_expiry(self) -> None:
        p = UserProfile(id="alice", expires_at=1000.0)
        assert p.is_expired(now=999.0) is False
        assert p.is_expired(now=1000.0) is True
        assert p.is_expired(now=2000.0) is True

    def test_attributes_accumulate(self) -> None:
        p = UserProfile(id="alice")
        p.add_attribute("email", "a@example.com")
        assert p.attributes["email"] == "a@example.com"
        p.add_attribute("email", "alice@example.com")
        p.add_attribute("email", ["x@example.com"])
        assert p.attributes["email"] == ["a@example.com", "alice@example.com", "x@example.com"]

    def test_roles(self) -> None:
        p = UserProfile(id="alice")
        p.add_role("admin")
        p.add_role("admin")
        assert p.roles == ["admin"]
        assert p.has_role("admin")
        assert not p.has_role("dev")

    def test_dict_conversion(self) -> None:
        p = UserProfile(
            id="alice",
            attributes={"email": "a@example.com"},
            roles=["admin"],
            client_name="bearer",
            expires_at=123.0,
        )
        data = p.to_dict()
        assert data["id"] == "alice"
        assert data["client_name"] == "bearer"
        assert UserProfile.from_dict(data) == p

    def test_from_minimal_dict(self) -> None:
        p = UserProfile.from_dict({"id": 42})
        assert p.id == "42"
        assert p.roles == []


# ═══════════════════════════════════════════════════════════════════════
# ProfileManager
# ═══════════════════════════════════════════════════════════════════════


class TestProfileManager:
    def test_empty_request(self) -> None:
        ctx = WebContext()
        manager = ProfileManager(ctx)
        assert ctx.loaded_from_session is None
        assert manager.load_from_request() == {}
        assert ctx.loaded_from_session is False

    def test_load_sets_session_flag(self) -> None:
        ctx = WebContext()
        assert ProfileManager(ctx).load() == {}
        assert ctx.get_request_attribute(LOAD_PROFILES_FROM_SESSION) is True

    def test_save_request_only(self) -> None:
        ctx = WebContext()
        manager = ProfileManager(ctx)
        manager.save({"A": UserProfile(id="a")}, to_session=False)

        assert list(manager.load_from_request()) == ["A"]
        assert ctx.session_store.get(USER_PROFILES) is None

    def test_save_does_not_touch_flag(self) -> None:
        ctx = WebContext()
        ProfileManager(ctx).save({"A": UserProfile(id="a")}, to_session=True)
        assert ctx.loaded_from_session is None

    def test_save_to_session_is_serialised(self) -> None:
        ctx = WebContext()
        ProfileManager(ctx).save({"A": UserProfile(id="a", roles=["r"])}, to_session=True)

        stored = ctx.session_store.get(USER_PROFILES)
        assert stored == {"A": UserProfile(id="a", roles=["r"]).to_dict()}

    def test_session_survives_across_requests(self) -> None:
        session = InMemorySessionStore()
        ProfileManager(WebContext(session_store=session)).save(
            {"idp": UserProfile(id="a")}, to_session=True
        )

        ctx = WebContext(session_store=session)
        manager = ProfileManager(ctx)
        assert manager.load_from_request() == {}
        assert [p.id for p in manager.load().values()] == ["a"]

    def test_single_profile_save_replaces(self) -> None:
        session = InMemorySessionStore()
        ProfileManager(WebContext(session_store=session)).save(
            {"idp": UserProfile(id="carol")}, to_session=True
        )
        ProfileManager(WebContext(session_store=session)).save(
            {"bearer": UserProfile(id="bob")}, to_session=True
        )
        assert list(session.get(USER_PROFILES)) == ["bearer"]

    def test_multi_profile_save_merges_by_client(self) -> None:
        session = InMemorySessionStore()
        ProfileManager(WebContext(session_store=session)).save(
            {"idp": UserProfile(id="carol"), "bearer": UserProfile(id="old")}, to_session=True
        )

        ctx = WebContext(session_store=session)
        ctx.set_request_attribute(USER_PROFILES, {"header": UserProfile(id="h")})
        ProfileManager(ctx).save(
            {"bearer": UserProfile(id="bob")}, to_session=True, multi_profile=True
        )

        assert sorted(session.get(USER_PROFILES)) == ["bearer", "idp"]
        assert session.get(USER_PROFILES)["bearer"]["id"] == "bob"
        assert sorted(ProfileManager(ctx).load_from_request()) == ["bearer", "header"]
        assert {n: p.id for n, p in ProfileManager(ctx).load().items()} == {
            "bearer": "bob",
            "header": "h",
            "idp": "carol",
        }

    def test_session_entry_wins_over_request(self) -> None:
        session = InMemorySessionStore()
        ProfileManager(WebContext(session_store=session)).save(
            {"idp": UserProfile(id="from-session")}, to_session=True
        )
        ctx = WebContext(session_store=session)
        ctx.set_request_attribute(
            USER_PROFILES,
            {"idp": UserProfile(id="from-request"), "other": UserProfile(id="o")},
        )

        profiles = ProfileManager(ctx).load()

        assert profiles["idp"].id == "from-session"
        assert profiles["other"].id == "o"

    def test_expired_profiles_dropped(self) -> None:
        ctx = WebContext()
        ProfileManager(ctx).save(
            {
                "old": UserProfile(id="old", expires_at=time.time() - 1),
                "new": UserProfile(id="new", expires_at=time.time() + 3600),
            },
            to_session=True,
        )
        manager = ProfileManager(ctx)
        assert list(manager.load_from_request()) == ["new"]
        assert list(manager.load()) == ["new"]

    def test_malformed_session_entry_skipped(self) -> None:
        session = InMemorySessionStore(
            {USER_PROFILES: {"bad": {"roles": []}, "good": {"id": "g"}}}
        )
        profiles = ProfileManager(WebContext(session_store=session)).load()
        assert list(profiles) == ["good"]

    def test_remove_all(self) -> None:
        ctx = WebContext()
        manager = ProfileManager(ctx)
        manager.save({"A": UserProfile(id="a")}, to_session=True)

        manager.remove()

        assert manager.load() == {}
        assert USER_PROFILES not in ctx.session_store  # type: ignore[operator]

    def test_remove_one_client(self) -> None:
        ctx = WebContext()
        manager = ProfileManager(ctx)
        manager.save({"A": UserProfile(id="a"), "B": UserProfile(id="b")}, to_session=True)

        manager.remove("A")

        assert list(manager.load_from_request()) == ["B"]
        assert list(ctx.session_store.get(USER_PROFILES)) == ["B"]


# ═══════════════════════════════════════════════════════════════════════
# InMemorySessionStore
# ═══════════════════════════════════════════════════════════════════════


class TestInMemorySessionStore:
    def test_get_set_remove(self) -> None:
        store = InMemorySessionStore()
        assert store.get("k") is None
        store.set("k", 1)
        assert store.get("k") == 1
        assert "k" in store
        assert len(store) == 1
        store.remove("k")
        store.remove("k")
        assert store.snapshot() == {}

    def test_wraps_existing_mapping(self) -> None:
        backing = {"a": 1}
        store = InMemorySessionStore(backing)
        store.set("b", 2)
        assert backing == {"a": 1, "b": 2}
        assert sorted(store) == ["a", "b"]
        assert store.data is backing
