"""Security decision engine."""

from request_sentinel.engine.finder import SecurityClientFinder
from request_sentinel.engine.security import SecurityLogic, perform

__all__ = ["SecurityClientFinder", "SecurityLogic", "perform"]
