"""User profile data models."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ProfileSet = Dict[str, "UserProfile"]
"""Profiles known for the current request/session, keyed by client name.

Plain ``dict`` keeps insertion order, which is the order clients
authenticated in.
"""


@dataclass
class UserProfile:
    """An authenticated identity produced by a client.

    Attributes:
        id: Stable identifier of the user within its client.
        attributes: Named attributes; values may be scalars or lists.
        roles: Role names granted to the user.
        client_name: Name of the client that produced the profile.
        expires_at: Optional epoch timestamp after which the profile is
            no longer usable.
    """

    id: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    roles: List[str] = field(default_factory=list)
    client_name: str = ""
    expires_at: Optional[float] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        current = time.time() if now is None else now
        return current >= self.expires_at

    def add_attribute(self, name: str, value: Any) -> None:
        """Add *value* under *name*; repeated names accumulate into a list."""
        if name not in self.attributes:
            self.attributes[name] = value
            return
        existing = self.attributes[name]
        if not isinstance(existing, list):
            existing = [existing]
        if isinstance(value, list):
            existing.extend(value)
        else:
            existing.append(value)
        self.attributes[name] = existing

    def add_role(self, role: str) -> None:
        if role not in self.roles:
            self.roles.append(role)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for session storage (JSON-compatible)."""
        return {
            "id": self.id,
            "attributes": dict(self.attributes),
            "roles": list(self.roles),
            "client_name": self.client_name,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UserProfile:
        return cls(
            id=str(data["id"]),
            attributes=dict(data.get("attributes") or {}),
            roles=list(data.get("roles") or []),
            client_name=data.get("client_name", ""),
            expires_at=data.get("expires_at"),
        )
