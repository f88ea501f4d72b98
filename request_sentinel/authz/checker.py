"""Authorization checker — evaluates named authorizers in order.

First-deny semantics: the first authorizer returning ``False`` ends
evaluation with ``False``; the first returning an
:class:`~request_sentinel.actions.HttpAction` ends it with that action.
No names means access is allowed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from request_sentinel.actions import HttpAction
from request_sentinel.authz.authorizers import DEFAULT_AUTHORIZERS, AuthorizationResult
from request_sentinel.clients.base import maybe_await
from request_sentinel.context import WebContext
from request_sentinel.profile.models import ProfileSet
from request_sentinel.utils import resolve_named, split_names

logger = logging.getLogger(__name__)


class AuthorizationChecker:
    """Evaluates authorizers against the full :data:`ProfileSet`."""

    async def is_authorized(
        self,
        context: WebContext,
        profiles: ProfileSet,
        authorizer_names: Optional[str],
        authorizers: Mapping[str, Any],
    ) -> AuthorizationResult:
        names = split_names(authorizer_names)
        if not names:
            return True

        available: Dict[str, Any] = dict(DEFAULT_AUTHORIZERS)
        available.update(authorizers)

        for name, authorizer in resolve_named(names, available, "authorizer"):
            check = authorizer.check if hasattr(authorizer, "check") else authorizer
            result = await maybe_await(check(context, profiles))
            if isinstance(result, HttpAction):
                logger.debug("Authorizer '%s' requires HTTP action %d", name, result.code)
                return result
            if not result:
                logger.info(
                    "Authorizer '%s' denied %s for profiles %s",
                    name,
                    context.path,
                    [p.id for p in profiles.values()],
                )
                return False
        return True
