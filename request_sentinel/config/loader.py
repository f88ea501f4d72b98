"""Security configuration loading and validation.

Loads a YAML file, expands ``${ENV_VAR}`` placeholders, validates it
against :class:`SecurityFileConfig` and builds the runtime objects:

* :func:`load_security_config`: path → validated pydantic model
* :func:`build_config`: model → :class:`Config`
* :func:`build_security_logic`: model → :class:`SecurityLogic`
* :func:`load_config`: path → :class:`Config`
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from request_sentinel.authz.authorizers import (
    IsAuthenticatedAuthorizer,
    ProfileIdAuthorizer,
    RequireAllRolesAuthorizer,
    RequireAnyRoleAuthorizer,
)
from request_sentinel.clients.base import Client
from request_sentinel.clients.direct import BearerTokenClient, HeaderClient, ParameterClient
from request_sentinel.clients.indirect import RedirectClient
from request_sentinel.clients.jwt import JwtClient
from request_sentinel.clients.registry import Clients
from request_sentinel.config.schema import (
    BearerClientConfig,
    HeaderClientConfig,
    HeaderMatcherConfig,
    JwtClientConfig,
    MethodMatcherConfig,
    ParameterClientConfig,
    PathMatcherConfig,
    ProfileIdAuthorizerConfig,
    RedirectClientConfig,
    RolesAuthorizerConfig,
    SecurityFileConfig,
)
from request_sentinel.config.settings import Config
from request_sentinel.display.logging_config import secret_redaction_filter
from request_sentinel.engine.finder import SecurityClientFinder
from request_sentinel.engine.security import SecurityLogic
from request_sentinel.errors import ConfigurationError
from request_sentinel.matching.matchers import HeaderMatcher, HttpMethodMatcher, PathMatcher

logger = logging.getLogger(__name__)

_YAML_EXTS = frozenset({".yaml", ".yml"})

# Regex for ${VAR_NAME}
_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ``${VAR}`` references in string values and keys.

    - If the env var is not set, the placeholder is left unchanged.
    - Non-string leaves are returned as-is.
    """
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(
            lambda m: os.environ.get(m.group(1), m.group(0)),
            value,
        )
    if isinstance(value, dict):
        return {expand_env_vars(k): expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse a YAML config file from *cfg_fpath*."""
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Only YAML files (.yaml, .yml) are supported."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            "Top-level configuration content must be a YAML mapping (dictionary)."
        )
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic validation errors into a readable multi-line string."""
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


def validate_config(raw_data: Dict[str, Any]) -> SecurityFileConfig:
    """Expand env vars in *raw_data* and validate it."""
    raw_data = expand_env_vars(raw_data)
    try:
        return SecurityFileConfig.model_validate(raw_data)
    except ValidationError as exc:
        error_summary = _format_validation_errors(exc)
        raise ConfigurationError(
            f"Configuration validation failed ({len(exc.errors())} error(s)):\n" f"{error_summary}"
        ) from exc


def load_security_config(cfg_fpath: str) -> SecurityFileConfig:
    """Load and return the validated :class:`SecurityFileConfig`."""
    logger.debug("Loading security configuration file: %s", cfg_fpath)

    if not os.path.exists(cfg_fpath):
        raise ConfigurationError(f"Configuration file does not exist: {cfg_fpath}")

    model = validate_config(_read_config_file(cfg_fpath))
    logger.info(
        "Configuration '%s' loaded (v%s). %d client(s), %d authorizer(s), %d matcher(s).",
        cfg_fpath,
        model.version,
        len(model.clients),
        len(model.authorizers),
        len(model.matchers),
    )
    return model


# ── Model → runtime objects ──────────────────────────────────────────────


def _build_client(name: str, cfg: Any) -> Client:
    if isinstance(cfg, HeaderClientConfig):
        return HeaderClient(name, header=cfg.header, roles_header=cfg.roles_header)
    if isinstance(cfg, BearerClientConfig):
        for token in cfg.tokens:
            secret_redaction_filter.register(token)
        return BearerTokenClient(
            name, cfg.tokens, roles=cfg.roles, challenge=cfg.challenge, realm=cfg.realm
        )
    if isinstance(cfg, ParameterClientConfig):
        for token in cfg.tokens:
            secret_redaction_filter.register(token)
        return ParameterClient(name, cfg.tokens, parameter=cfg.parameter, roles=cfg.roles)
    if isinstance(cfg, JwtClientConfig):
        secret_redaction_filter.register(cfg.key)
        return JwtClient(
            name,
            cfg.key,
            algorithms=cfg.algorithms,
            issuer=cfg.issuer,
            audience=cfg.audience,
            leeway=cfg.leeway,
        )
    if isinstance(cfg, RedirectClientConfig):
        return RedirectClient(name, login_url=cfg.login_url, callback_url=cfg.callback_url)
    raise ConfigurationError(f"Unsupported client type for '{name}': {type(cfg).__name__}")


def _build_authorizer(cfg: Any) -> Any:
    if isinstance(cfg, RolesAuthorizerConfig):
        if cfg.type == "require_all_roles":
            return RequireAllRolesAuthorizer(cfg.roles)
        return RequireAnyRoleAuthorizer(cfg.roles)
    if isinstance(cfg, ProfileIdAuthorizerConfig):
        return ProfileIdAuthorizer(cfg.ids)
    return IsAuthenticatedAuthorizer()


def _build_matcher(cfg: Any) -> Any:
    if isinstance(cfg, PathMatcherConfig):
        return PathMatcher(cfg.includes, cfg.excludes)
    if isinstance(cfg, MethodMatcherConfig):
        return HttpMethodMatcher(cfg.methods)
    if isinstance(cfg, HeaderMatcherConfig):
        try:
            return HeaderMatcher(cfg.header, cfg.pattern)
        except re.error as exc:
            raise ConfigurationError(f"Invalid header matcher pattern {cfg.pattern!r}: {exc}") from exc
    raise ConfigurationError(f"Unsupported matcher type: {type(cfg).__name__}")


def build_config(model: SecurityFileConfig) -> Config:
    """Instantiate clients, authorizers and matchers from *model*."""
    clients = Clients(
        callback_url=model.security.callback_url,
        default_security_clients=model.security.clients,
    )
    for name, client_cfg in model.clients.items():
        clients.add(_build_client(name, client_cfg))

    config = Config(
        clients,
        default_authorizers=model.security.authorizers,
        default_matchers=model.security.matchers,
        multi_profile=model.security.multi_profile,
    )
    for name, authz_cfg in model.authorizers.items():
        config.add_authorizer(name, _build_authorizer(authz_cfg))
    for name, matcher_cfg in model.matchers.items():
        config.add_matcher(name, _build_matcher(matcher_cfg))
    logger.debug("Security config built: %r", config)
    return config


def build_security_logic(model: SecurityFileConfig) -> SecurityLogic:
    """Create a :class:`SecurityLogic` honouring the file's engine settings."""
    return SecurityLogic(
        client_finder=SecurityClientFinder(model.security.default_client_parameter),
        save_profile_in_session=model.security.save_profile_in_session,
    )


def load_config(cfg_fpath: str) -> Config:
    """Load a YAML file straight into a runtime :class:`Config`."""
    return build_config(load_security_config(cfg_fpath))
