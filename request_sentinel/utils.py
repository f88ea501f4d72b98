"""Helpers for comma-separated name lists."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple, TypeVar

from request_sentinel.constants import ELEMENT_SEPARATOR
from request_sentinel.errors import ConfigurationError

T = TypeVar("T")


def split_names(names: Optional[str]) -> List[str]:
    """Split a comma-separated list, trimming blanks away.

    >>> split_names(" a, b ,,c ")
    ['a', 'b', 'c']
    """
    if not names:
        return []
    return [n.strip() for n in names.split(ELEMENT_SEPARATOR) if n.strip()]


def resolve_named(
    names: List[str],
    registry: Mapping[str, T],
    kind: str,
) -> List[Tuple[str, T]]:
    """Look up every name (case-insensitively) in *registry*, in order.

    Raises :class:`ConfigurationError` naming the first unknown entry.
    """
    lowered: Dict[str, Tuple[str, T]] = {k.strip().lower(): (k, v) for k, v in registry.items()}
    resolved: List[Tuple[str, T]] = []
    for name in names:
        entry = lowered.get(name.lower())
        if entry is None:
            raise ConfigurationError(f"The {kind} '{name}' must be defined in the security configuration")
        resolved.append(entry)
    return resolved
