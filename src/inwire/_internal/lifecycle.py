from __future__ import annotations

import inspect
from collections.abc import Awaitable
from typing import Protocol, runtime_checkable


@runtime_checkable
class OnInit(Protocol):
    """Capability of a resolved value that wants a post-construction hook.

    ``on_init`` may be a plain method or a coroutine function. It runs once per
    cached singleton, right after resolution or during ``preload``.
    """

    def on_init(self) -> Awaitable[None] | None: ...


@runtime_checkable
class OnDestroy(Protocol):
    """Capability of a resolved value that owns resources to release.

    ``on_destroy`` may be a plain method or a coroutine function. It runs during
    ``dispose`` in reverse resolution order.
    """

    def on_destroy(self) -> Awaitable[None] | None: ...


def _has_hook(value: object, name: str) -> bool:
    # getattr_static never runs __getattr__ or descriptors on the value.
    if isinstance(value, type):
        return False
    return callable(inspect.getattr_static(value, name, None))


def has_on_init(value: object) -> bool:
    """Return true when ``value`` is an instance exposing a callable ``on_init``."""
    return _has_hook(value, "on_init")


def has_on_destroy(value: object) -> bool:
    """Return true when ``value`` is an instance exposing a callable ``on_destroy``."""
    return _has_hook(value, "on_destroy")
