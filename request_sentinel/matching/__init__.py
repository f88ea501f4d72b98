"""Request matchers and the matcher gate."""

from request_sentinel.matching.checker import MatchingChecker
from request_sentinel.matching.matchers import (
    FunctionMatcher,
    HeaderMatcher,
    HttpMethodMatcher,
    Matcher,
    PathMatcher,
)

__all__ = [
    "FunctionMatcher",
    "HeaderMatcher",
    "HttpMethodMatcher",
    "Matcher",
    "MatchingChecker",
    "PathMatcher",
]
