from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class CycleDetector:
    """Track which keys are currently being resolved on the active call stack.

    The detector only records state. The resolver decides what a re-entrant
    key means.
    """

    def __init__(self) -> None:
        self._resolving: set[str] = set()

    def enter(self, key: str) -> None:
        self._resolving.add(key)

    def leave(self, key: str) -> None:
        self._resolving.discard(key)

    def is_resolving(self, key: str) -> bool:
        return key in self._resolving

    @contextmanager
    def guard(self, key: str) -> Iterator[None]:
        """Mark ``key`` as active for the duration of the block, on every exit path."""
        self.enter(key)
        try:
            yield
        finally:
            self.leave(key)
