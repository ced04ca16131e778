from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WarningKind(str, Enum):
    """Kinds of non-fatal diagnostics a resolver records."""

    SCOPE_MISMATCH = "scope_mismatch"
    """A singleton captured a transient dependency."""

    ASYNC_INIT_ERROR = "async_init_error"
    """A background ``on_init`` coroutine failed after the value was handed out."""


@dataclass(frozen=True, slots=True)
class ContainerWarning:
    """A diagnostic record exposed through ``Resolver.get_warnings``.

    ``keys`` lists every dependency key the warning references and is what
    ``clear_warnings_for_keys`` matches against.
    """

    kind: WarningKind
    message: str
    keys: tuple[str, ...]
    details: Mapping[str, Any] = field(default_factory=dict)

    def references_any(self, keys: Iterable[str]) -> bool:
        return not set(self.keys).isdisjoint(keys)


def scope_mismatch_warning(key: str, dependency: str) -> ContainerWarning:
    return ContainerWarning(
        kind=WarningKind.SCOPE_MISMATCH,
        message=(
            f"Singleton '{key}' depends on transient '{dependency}'. "
            f"The transient value is captured once and will not be recreated."
        ),
        keys=(key, dependency),
        details={"singleton": key, "transient": dependency},
    )


def async_init_error_warning(key: str, error: BaseException) -> ContainerWarning:
    return ContainerWarning(
        kind=WarningKind.ASYNC_INIT_ERROR,
        message=f"on_init() of '{key}' failed: {type(error).__name__}: {error}",
        keys=(key,),
        details={"key": key, "error": error},
    )
