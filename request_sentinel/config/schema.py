"""Pydantic models for the YAML security configuration.

Example::

    version: "1"
    security:
      clients: "bearer,login"
      authorizers: "admins"
    clients:
      bearer: {type: bearer, tokens: {"${API_TOKEN}": "alice"}}
      login: {type: redirect, login_url: "https://idp.example.com/login"}
    authorizers:
      admins: {type: require_any_role, roles: [admin]}
    matchers:
      api: {type: path, includes: ["/api/*"]}
"""

from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from request_sentinel.constants import DEFAULT_CLIENT_NAME_PARAMETER

# ── Clients ──────────────────────────────────────────────────────────────


class HeaderClientConfig(BaseModel):
    """Identity taken from a trusted request header."""

    type: Literal["header"]
    header: str = Field(default="X-User", min_length=1)
    roles_header: str = Field(default="", description="Comma-separated roles header.")


class BearerClientConfig(BaseModel):
    """Static bearer tokens read from the Authorization header."""

    type: Literal["bearer"]
    tokens: Dict[str, str] = Field(
        ..., min_length=1, description="token → user id. Tokens support ${ENV_VAR}."
    )
    roles: Dict[str, List[str]] = Field(default_factory=dict, description="user id → roles.")
    challenge: bool = Field(
        default=False, description="Answer 401 + WWW-Authenticate on an invalid token."
    )
    realm: str = "sentinel"


class ParameterClientConfig(BaseModel):
    """Static tokens read from a request parameter."""

    type: Literal["parameter"]
    parameter: str = Field(default="token", min_length=1)
    tokens: Dict[str, str] = Field(..., min_length=1)
    roles: Dict[str, List[str]] = Field(default_factory=dict)


class JwtClientConfig(BaseModel):
    """JWT bearer tokens verified with a static key."""

    type: Literal["jwt"]
    key: str = Field(..., min_length=1, description="Secret or PEM public key. Supports ${ENV_VAR}.")
    algorithms: List[str] = Field(default_factory=lambda: ["HS256"], min_length=1)
    issuer: str = ""
    audience: str = ""
    leeway: float = Field(default=0.0, ge=0)


class RedirectClientConfig(BaseModel):
    """Indirect client redirecting to an external login page."""

    type: Literal["redirect"]
    login_url: Optional[str] = None
    callback_url: Optional[str] = None

    @field_validator("login_url", "callback_url")
    @classmethod
    def _validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v.startswith(("http://", "https://", "/")):
            raise ValueError(f"URL '{v}' must be absolute or start with '/'")
        return v


ClientConfig = Annotated[
    Union[
        HeaderClientConfig,
        BearerClientConfig,
        ParameterClientConfig,
        JwtClientConfig,
        RedirectClientConfig,
    ],
    Field(discriminator="type"),
]


# ── Authorizers ──────────────────────────────────────────────────────────


class IsAuthenticatedConfig(BaseModel):
    type: Literal["authenticated"]


class RolesAuthorizerConfig(BaseModel):
    type: Literal["require_any_role", "require_all_roles"]
    roles: List[str] = Field(..., min_length=1)


class ProfileIdAuthorizerConfig(BaseModel):
    type: Literal["profile_id"]
    ids: List[str] = Field(..., min_length=1)


AuthorizerConfig = Annotated[
    Union[IsAuthenticatedConfig, RolesAuthorizerConfig, ProfileIdAuthorizerConfig],
    Field(discriminator="type"),
]


# ── Matchers ─────────────────────────────────────────────────────────────


class PathMatcherConfig(BaseModel):
    type: Literal["path"]
    includes: List[str] = Field(default_factory=lambda: ["*"])
    excludes: List[str] = Field(default_factory=list)


class MethodMatcherConfig(BaseModel):
    type: Literal["method"]
    methods: List[str] = Field(..., min_length=1)


class HeaderMatcherConfig(BaseModel):
    type: Literal["header"]
    header: str = Field(..., min_length=1)
    pattern: Optional[str] = None


MatcherConfig = Annotated[
    Union[PathMatcherConfig, MethodMatcherConfig, HeaderMatcherConfig],
    Field(discriminator="type"),
]


# ── Top-level config ────────────────────────────────────────────────────


class SecuritySettings(BaseModel):
    """Engine-wide settings.

    ``clients``, ``authorizers``, ``matchers`` and ``multi_profile`` are the
    values used when a call to ``perform`` passes ``None`` for them.
    """

    clients: Optional[str] = Field(
        default=None, description="Default security clients (comma-separated)."
    )
    authorizers: Optional[str] = None
    matchers: Optional[str] = None
    multi_profile: bool = False
    save_profile_in_session: bool = False
    callback_url: Optional[str] = None
    default_client_parameter: str = Field(default=DEFAULT_CLIENT_NAME_PARAMETER, min_length=1)


class SecurityFileConfig(BaseModel):
    """Top-level validated security configuration (version ``"1"``)."""

    version: str = "1"
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    clients: Dict[str, ClientConfig] = Field(default_factory=dict)
    authorizers: Dict[str, AuthorizerConfig] = Field(default_factory=dict)
    matchers: Dict[str, MatcherConfig] = Field(default_factory=dict)

    @field_validator("clients", "authorizers", "matchers")
    @classmethod
    def _validate_names(cls, v: Dict[str, object]) -> Dict[str, object]:
        seen = set()
        for name in v:
            stripped = name.strip()
            if not stripped:
                raise ValueError("Names must be non-empty strings")
            if stripped != name:
                raise ValueError(f"Name '{name}' has leading/trailing whitespace")
            if "," in name:
                raise ValueError(f"Name '{name}' must not contain ','")
            if name.lower() in seen:
                raise ValueError(f"Duplicate name '{name}' (names are case-insensitive)")
            seen.add(name.lower())
        return v
