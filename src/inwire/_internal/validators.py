from __future__ import annotations

from collections.abc import Iterable, Mapping

from inwire._internal.defaults import RESERVED_KEYS, SUGGESTION_DISTANCE_THRESHOLD
from inwire.exceptions import InwireInvalidRegistrationError


def levenshtein_distance(left: str, right: str) -> int:
    """Return the number of single-character edits turning ``left`` into ``right``."""
    if len(left) < len(right):
        left, right = right, left

    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (left_char != right_char),
                ),
            )
        previous = current
    return previous[-1]


def suggest_key(key: str, registered: Iterable[str]) -> str | None:
    """Return the registered key closest to ``key``, if it is close enough.

    Ties keep the first candidate in ``registered`` order.
    """
    best: str | None = None
    best_distance = SUGGESTION_DISTANCE_THRESHOLD
    for candidate in registered:
        distance = levenshtein_distance(key, candidate)
        if distance < best_distance:
            best, best_distance = candidate, distance
    return best


class RegistrationValidator:
    """Validates factory mappings before they reach a resolver."""

    def validate_config(self, config: Mapping[str, object]) -> None:
        """Reject keys the container cannot expose and values it cannot resolve.

        Args:
            config: Mapping of dependency keys to factories or plain values.

        """
        for key, value in config.items():
            self.validate_key(key)
            if value is None:
                msg = f"Dependency '{key}' maps to None. Register a factory or a non-None value."
                raise InwireInvalidRegistrationError(msg)

    def validate_key(self, key: object) -> None:
        if not isinstance(key, str):
            msg = f"Dependency keys must be strings, got {key!r}."
            raise InwireInvalidRegistrationError(msg)

        if not key.isidentifier():
            msg = f"Dependency key {key!r} is not a valid Python identifier."
            raise InwireInvalidRegistrationError(msg)

        if key.startswith("_"):
            msg = f"Dependency key {key!r} cannot start with an underscore."
            raise InwireInvalidRegistrationError(msg)

        if key in RESERVED_KEYS:
            msg = (
                f"Dependency key {key!r} is reserved by the container API. "
                f"Reserved keys: {', '.join(sorted(RESERVED_KEYS))}."
            )
            raise InwireInvalidRegistrationError(msg)
