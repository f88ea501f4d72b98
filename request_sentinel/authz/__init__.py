"""Authorizers and the authorization checker."""

from request_sentinel.authz.authorizers import (
    DEFAULT_AUTHORIZERS,
    Authorizer,
    FunctionAuthorizer,
    IsAuthenticatedAuthorizer,
    ProfileIdAuthorizer,
    RequireAllRolesAuthorizer,
    RequireAnyRoleAuthorizer,
)
from request_sentinel.authz.checker import AuthorizationChecker

__all__ = [
    "DEFAULT_AUTHORIZERS",
    "AuthorizationChecker",
    "Authorizer",
    "FunctionAuthorizer",
    "IsAuthenticatedAuthorizer",
    "ProfileIdAuthorizer",
    "RequireAllRolesAuthorizer",
    "RequireAnyRoleAuthorizer",
]
