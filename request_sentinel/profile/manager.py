"""Profile store — reads and writes profiles for one invocation.

Two scopes are managed:

* **request**: a :data:`ProfileSet` kept in the context's request
  attributes; it never outlives the current invocation.
* **session**: serialised profiles kept in the context's
  :class:`SessionStore`; they survive until removed or replaced.

Every read records in the request attributes whether the profiles came
from the session (see :attr:`WebContext.loaded_from_session`).  Expired
profiles are dropped on read.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from request_sentinel.constants import LOAD_PROFILES_FROM_SESSION, USER_PROFILES
from request_sentinel.context import WebContext
from request_sentinel.profile.models import ProfileSet, UserProfile

logger = logging.getLogger(__name__)


class ProfileManager:
    """Profile store bound to a single :class:`WebContext`."""

    def __init__(self, context: WebContext) -> None:
        self._context = context

    def load_from_request(self) -> ProfileSet:
        """Return the profiles already resolved during this request."""
        self._context.set_request_attribute(LOAD_PROFILES_FROM_SESSION, False)
        return _drop_expired(self._request_profiles())

    def load(self) -> ProfileSet:
        """Return request profiles merged with the session profiles.

        Session entries win over request entries for the same client name.
        """
        self._context.set_request_attribute(LOAD_PROFILES_FROM_SESSION, True)
        profiles = self._request_profiles()
        profiles.update(self._session_profiles())
        return _drop_expired(profiles)

    def save(self, profiles: ProfileSet, to_session: bool, multi_profile: bool = False) -> None:
        """Store *profiles* in the request and, when *to_session*, the session.

        In single-profile mode the stored profiles are replaced.  With
        *multi_profile* the new entries are merged by client name, so a
        profile saved earlier for another client is kept.
        """
        request_profiles = self._request_profiles() if multi_profile else {}
        request_profiles.update(profiles)
        self._context.set_request_attribute(USER_PROFILES, request_profiles)
        if to_session:
            stored = self._context.session_store.get(USER_PROFILES) if multi_profile else None
            session_profiles: Dict[str, Any] = dict(stored) if isinstance(stored, dict) else {}
            session_profiles.update({name: profile.to_dict() for name, profile in profiles.items()})
            self._context.session_store.set(USER_PROFILES, session_profiles)
        logger.debug(
            "Saved %d profile(s) (session=%s, multi=%s): %s",
            len(profiles),
            to_session,
            multi_profile,
            list(profiles),
        )

    def remove(self, client_name: Optional[str] = None) -> None:
        """Remove the profile of *client_name*, or every profile when ``None``."""
        request_profiles = self._request_profiles()
        stored = self._context.session_store.get(USER_PROFILES)

        if client_name is None:
            self._context.set_request_attribute(USER_PROFILES, {})
            if stored is not None:
                self._context.session_store.remove(USER_PROFILES)
            return

        request_profiles.pop(client_name, None)
        self._context.set_request_attribute(USER_PROFILES, request_profiles)
        if isinstance(stored, dict) and client_name in stored:
            remaining = {k: v for k, v in stored.items() if k != client_name}
            self._context.session_store.set(USER_PROFILES, remaining)

    # ── Internals ────────────────────────────────────────────────────

    def _request_profiles(self) -> ProfileSet:
        return dict(self._context.get_request_attribute(USER_PROFILES) or {})

    def _session_profiles(self) -> ProfileSet:
        stored: Any = self._context.session_store.get(USER_PROFILES)
        if not stored:
            return {}
        profiles: ProfileSet = {}
        for name, data in dict(stored).items():
            if isinstance(data, UserProfile):
                profiles[name] = data
                continue
            try:
                profiles[name] = UserProfile.from_dict(data)
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed session profile for client '%s'", name)
        return profiles


def _drop_expired(profiles: Dict[str, UserProfile]) -> ProfileSet:
    result: ProfileSet = {}
    for name, profile in profiles.items():
        if profile.is_expired():
            logger.debug("Profile '%s' of client '%s' has expired", profile.id, name)
            continue
        result[name] = profile
    return result
