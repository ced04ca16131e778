from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence

from inwire._internal.resolver import Resolver
from inwire.exceptions import InwireAggregateError, InwireCircularDependencyError

logger = logging.getLogger(__name__)


class Preloader:
    """Resolve keys eagerly and run their ``on_init`` hooks in dependency order.

    Values are first resolved with init hooks deferred, so a failing factory
    leaves nothing half-initialized. The transitive closure of the requested
    keys is then split into topological levels; each level's hooks run
    concurrently and a level starts only after the previous one settled.
    """

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    async def preload(self, keys: Sequence[str] | None = None) -> None:
        """Resolve ``keys`` (all local keys by default) and initialize them.

        Raises:
            InwireError: A factory failed; entries cached by this call are rolled back.
            InwireCircularDependencyError: The recorded graph has a cycle spanning
                several resolve calls, so no init order exists.
            InwireAggregateError: Several ``on_init`` hooks failed.

        """
        resolver = self._resolver
        requested = list(resolver.get_factories()) if keys is None else list(keys)
        if not requested:
            return

        self._resolve_all(requested)

        closure = self._collect_closure(requested, resolver.get_dep_graph())
        levels = self._topological_levels(closure, resolver.get_dep_graph())
        logger.debug("Preloading %d keys in %d levels: %s", len(closure), len(levels), levels)

        errors: list[BaseException] = []
        for level in levels:
            results = await asyncio.gather(
                *(resolver.call_on_init(key) for key in level),
                return_exceptions=True,
            )
            errors.extend(result for result in results if isinstance(result, BaseException))

        if not errors:
            logger.info("Preloaded %d keys", len(closure))
            return
        if len(errors) == 1:
            raise errors[0]
        msg = "Multiple on_init() hooks failed during preload"
        raise InwireAggregateError(msg, errors)

    def _resolve_all(self, keys: Iterable[str]) -> None:
        resolver = self._resolver
        cached_before = set(resolver.get_resolved_keys())
        previous_defer = resolver.defer_on_init
        resolver.set_defer_on_init(True)
        try:
            for key in keys:
                resolver.resolve(key)
        except BaseException:
            added = [key for key in resolver.get_resolved_keys() if key not in cached_before]
            logger.debug("Preload failed, rolling back %d cached keys: %s", len(added), added)
            resolver.evict(*added)
            resolver.clear_warnings_for_keys(*added)
            raise
        finally:
            resolver.set_defer_on_init(previous_defer)

    def _collect_closure(self, roots: Iterable[str], graph: Mapping[str, Sequence[str]]) -> list[str]:
        visited: list[str] = []
        seen: set[str] = set()

        def visit(key: str) -> None:
            if key in seen:
                return
            seen.add(key)
            visited.append(key)
            for dep in graph.get(key, ()):
                visit(dep)

        for root in roots:
            visit(root)
        return visited

    def _topological_levels(
        self,
        closure: Sequence[str],
        graph: Mapping[str, Sequence[str]],
    ) -> list[list[str]]:
        """Split ``closure`` into levels with Kahn's algorithm.

        An edge ``key -> dep`` means ``dep`` initializes first, so a key's level
        is one past the highest level among its dependencies.
        """
        members = set(closure)
        pending_deps = {key: {dep for dep in graph.get(key, ()) if dep in members} for key in closure}
        dependents: dict[str, list[str]] = {key: [] for key in closure}
        for key, deps in pending_deps.items():
            for dep in deps:
                dependents[dep].append(key)

        levels: list[list[str]] = []
        current = [key for key in closure if not pending_deps[key]]
        placed = 0
        while current:
            levels.append(current)
            placed += len(current)
            following: list[str] = []
            for key in current:
                for dependent in dependents[key]:
                    pending_deps[dependent].discard(key)
                    if not pending_deps[dependent]:
                        following.append(dependent)
            current = following

        if placed != len(closure):
            stuck = [key for key in closure if pending_deps[key]]
            logger.debug("Unplaceable preload keys: %s", stuck)
            raise InwireCircularDependencyError(stuck[0], chain=[*stuck, stuck[0]])

        return levels
