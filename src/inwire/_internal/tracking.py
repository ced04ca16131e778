from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

ResolveFn = Callable[[str, list[str]], Any]


class TrackingAccessor:
    """Accessor handed to factories that records every key the factory reads.

    Factories read dependencies with ``deps.get("db")``, ``deps["db"]`` or
    ``deps.db``. Every read resolves through the owning resolver, so nested
    factories are tracked the same way. The output list is a set kept in
    first-read order, not a log of reads: a key read twice is recorded once.

    Names starting with an underscore are never treated as dependency keys.
    Python machinery probes such attributes (``__deepcopy__``, ``_fields``...)
    and they must not show up in the dependency graph.
    """

    __slots__ = ("_chain", "_deps_out", "_resolve_fn")

    def __init__(self, deps_out: list[str], chain: list[str], resolve_fn: ResolveFn) -> None:
        self._deps_out = deps_out
        self._chain = chain
        self._resolve_fn = resolve_fn

    def get(self, key: str) -> Any:
        if key not in self._deps_out:
            self._deps_out.append(key)
        return self._resolve_fn(key, self._chain)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __repr__(self) -> str:
        chain = " -> ".join(self._chain)
        return f"TrackingAccessor(chain={chain!r}, reads={self._deps_out!r})"


class DependencyTracker:
    """Build tracking accessors and keep the discovered dependency graph.

    The graph maps a key to the keys its factory read during its latest
    successful resolution. Conditional reads therefore change the edge set
    between resolutions.
    """

    def __init__(self) -> None:
        self._dep_graph: dict[str, list[str]] = {}

    def create_tracking_accessor(
        self,
        deps_out: list[str],
        chain: list[str],
        resolve_fn: ResolveFn,
    ) -> TrackingAccessor:
        return TrackingAccessor(deps_out, chain, resolve_fn)

    def record_deps(self, key: str, deps: Sequence[str]) -> None:
        self._dep_graph[key] = list(deps)

    def get_dep_graph(self) -> dict[str, list[str]]:
        return {key: list(deps) for key, deps in self._dep_graph.items()}

    def clear_dep_graph(self, *keys: str) -> None:
        for key in keys:
            self._dep_graph.pop(key, None)

    def clear_all_dep_graph(self) -> None:
        self._dep_graph.clear()
