"""Built-in request matchers.

A matcher is any object with ``matches(context) -> bool`` (sync or
async), or a plain callable with the same signature.  Matchers only
look at the request; they decide whether security applies at all.
"""

from __future__ import annotations

import fnmatch
import re
from typing import Any, Callable, Iterable, List, Optional, Protocol, runtime_checkable

from request_sentinel.context import WebContext
from request_sentinel.errors import ConfigurationError


@runtime_checkable
class Matcher(Protocol):
    def matches(self, context: WebContext) -> Any: ...


class PathMatcher:
    """Matches request paths against glob patterns.

    ``includes`` defaults to everything; a path matching any of
    ``excludes`` never matches, even when included.
    """

    def __init__(
        self,
        includes: Optional[Iterable[str]] = None,
        excludes: Optional[Iterable[str]] = None,
    ) -> None:
        self.includes: List[str] = list(includes or ["*"])
        self.excludes: List[str] = list(excludes or [])

    def matches(self, context: WebContext) -> bool:
        path = context.path
        if any(fnmatch.fnmatchcase(path, pat) for pat in self.excludes):
            return False
        return any(fnmatch.fnmatchcase(path, pat) for pat in self.includes)


class HttpMethodMatcher:
    """Matches when the request method is one of *methods*."""

    def __init__(self, methods: Iterable[str]) -> None:
        self.methods = {m.upper() for m in methods}
        if not self.methods:
            raise ConfigurationError("HttpMethodMatcher requires at least one method")

    def matches(self, context: WebContext) -> bool:
        return context.method in self.methods


class HeaderMatcher:
    """Matches when *header* is present and its value matches *pattern*.

    With ``pattern=None`` only presence is checked.
    """

    def __init__(self, header: str, pattern: Optional[str] = None) -> None:
        self.header = header
        self._regex = re.compile(pattern) if pattern is not None else None

    def matches(self, context: WebContext) -> bool:
        value = context.get_request_header(self.header)
        if value is None:
            return False
        if self._regex is None:
            return True
        return self._regex.fullmatch(value) is not None


class FunctionMatcher:
    """Adapts a ``(context) -> bool`` callable."""

    def __init__(self, fn: Callable[[WebContext], Any]) -> None:
        self._fn = fn

    def matches(self, context: WebContext) -> Any:
        return self._fn(context)
