"""Direct client validating JWT bearer tokens.

Keys are supplied directly (shared secret for HMAC algorithms, PEM
public key for RSA/EC).  Requires ``PyJWT``; RSA/EC keys additionally
need ``cryptography``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import jwt

from request_sentinel.clients.base import Credentials, DirectClient
from request_sentinel.context import WebContext
from request_sentinel.errors import ConfigurationError, CredentialsError
from request_sentinel.profile.models import UserProfile

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "

# Claims copied verbatim onto the profile attributes
_PROFILE_CLAIMS = ("email", "name", "iss", "aud")


class JwtClient(DirectClient):
    """Authenticates ``Authorization: Bearer <jwt>`` requests.

    Parameters
    ----------
    key:
        Secret (HS*) or public key (RS*/ES*) used to verify signatures.
    algorithms:
        Accepted signing algorithms.
    issuer, audience:
        Expected ``iss`` / ``aud`` claims; checked only when set.
    """

    def __init__(
        self,
        name: str,
        key: str,
        algorithms: Optional[List[str]] = None,
        issuer: str = "",
        audience: str = "",
        leeway: float = 0.0,
    ) -> None:
        super().__init__(name)
        if not key:
            raise ConfigurationError(f"JWT client '{name}' requires a key")
        self._key = key
        self.algorithms = list(algorithms or ["HS256"])
        self.issuer = issuer
        self.audience = audience
        self.leeway = leeway

    def fetch_credentials(self, context: WebContext) -> Optional[Credentials]:
        header = context.get_request_header("Authorization") or ""
        if not header.lower().startswith(_BEARER_PREFIX):
            return None
        token = header[len(_BEARER_PREFIX):].strip()
        if not token:
            return None
        try:
            claims = self._decode(token)
        except CredentialsError as exc:
            logger.info("%s for %s", exc, context.path)
            return None
        return Credentials(token=token, username=str(claims.get("sub", "")), extra=claims)

    def build_profile(self, credentials: Credentials, context: WebContext) -> Optional[UserProfile]:
        claims = credentials.extra
        if not credentials.username:
            logger.info("JWT without 'sub' claim rejected by client '%s'", self.name)
            return None
        profile = UserProfile(
            id=credentials.username,
            roles=_roles_from_claims(claims),
            expires_at=float(claims["exp"]) if "exp" in claims else None,
        )
        for claim in _PROFILE_CLAIMS:
            if claim in claims:
                profile.add_attribute(claim, claims[claim])
        return profile

    def _decode(self, token: str) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        kwargs: Dict[str, Any] = {
            "algorithms": self.algorithms,
            "options": options,
            "leeway": self.leeway,
        }
        if self.issuer:
            kwargs["issuer"] = self.issuer
        if self.audience:
            kwargs["audience"] = self.audience
        else:
            options["verify_aud"] = False

        try:
            return jwt.decode(token, self._key, **kwargs)
        except jwt.exceptions.ExpiredSignatureError as exc:
            raise CredentialsError("token has expired", client_name=self.name) from exc
        except jwt.exceptions.InvalidTokenError as exc:
            raise CredentialsError(f"invalid token: {exc}", client_name=self.name) from exc


def _roles_from_claims(claims: Dict[str, Any]) -> List[str]:
    # "roles" first, then Keycloak-style realm_access.roles
    roles = claims.get("roles")
    if not roles:
        realm_access = claims.get("realm_access")
        roles = realm_access.get("roles") if isinstance(realm_access, dict) else None
    if isinstance(roles, str):
        return [roles]
    if isinstance(roles, (list, tuple)):
        return [str(r) for r in roles]
    return []
