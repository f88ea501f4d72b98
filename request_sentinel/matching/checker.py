"""Matcher gate — decides whether security applies to a request."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from request_sentinel.clients.base import maybe_await
from request_sentinel.context import WebContext
from request_sentinel.utils import resolve_named, split_names

logger = logging.getLogger(__name__)


class MatchingChecker:
    """Evaluates a comma-separated list of named matchers (logical AND).

    No names means every request matches.  Unknown names raise
    :class:`~request_sentinel.errors.ConfigurationError`.
    """

    async def matches(
        self,
        context: WebContext,
        matcher_names: Optional[str],
        matchers: Mapping[str, Any],
    ) -> bool:
        names = split_names(matcher_names)
        if not names:
            return True

        for name, matcher in resolve_named(names, matchers, "matcher"):
            check = matcher.matches if hasattr(matcher, "matches") else matcher
            if not await maybe_await(check(context)):
                logger.debug("Matcher '%s' rejected %s %s", name, context.method, context.path)
                return False
        return True
