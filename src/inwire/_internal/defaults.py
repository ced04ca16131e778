from __future__ import annotations

RESERVED_KEYS: frozenset[str] = frozenset(
    {
        "describe",
        "dispose",
        "extend",
        "get",
        "health",
        "inspect",
        "name",
        "preload",
        "reset",
        "resolve",
        "resolver",
        "scope",
    },
)
"""Container attribute names that cannot be used as dependency keys."""

SUGGESTION_DISTANCE_THRESHOLD = 4
"""Edit distance a registered key must stay below to be offered as a suggestion."""

TRANSIENT_MARKER = "__inwire_transient__"
"""Attribute set on factories wrapped with ``transient``."""
