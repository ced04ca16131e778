from __future__ import annotations

import functools
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeAlias, TypeVar

from inwire._internal.defaults import TRANSIENT_MARKER

T = TypeVar("T")

Factory: TypeAlias = Callable[[Any], Any]
"""A callable receiving the dependency accessor and returning the dependency."""


class Lifetime(str, Enum):
    """Defines how long a resolved value lives in its container."""

    SINGLETON = "singleton"
    """The value is created once and cached until reset or dispose."""

    TRANSIENT = "transient"
    """A new value is created on every access and never cached."""


def transient(factory: Callable[[Any], T]) -> Callable[[Any], T]:
    """Mark a factory so it produces a new value on every access.

    Examples:
        .. code-block:: python

            container = Container(
                {
                    "logger": lambda c: Logger(),
                    "request_id": transient(lambda c: uuid.uuid4()),
                },
            )

            assert container.request_id != container.request_id

    """

    @functools.wraps(factory)
    def wrapper(accessor: Any) -> T:
        return factory(accessor)

    setattr(wrapper, TRANSIENT_MARKER, True)
    return wrapper


def is_transient(factory: object) -> bool:
    """Return true when ``factory`` was produced by ``transient``."""
    return callable(factory) and getattr(factory, TRANSIENT_MARKER, False) is True


def as_factory(value: object) -> Factory:
    """Return ``value`` unchanged when callable, otherwise wrap it as a constant factory."""
    if callable(value):
        return value

    def constant(_: Any) -> object:
        return value

    return constant
