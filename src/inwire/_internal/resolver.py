from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Awaitable, Iterable, Mapping, Sequence
from typing import Any

from inwire._internal.cycle_detector import CycleDetector
from inwire._internal.diagnostics import (
    ContainerWarning,
    async_init_error_warning,
    scope_mismatch_warning,
)
from inwire._internal.lifecycle import has_on_init
from inwire._internal.tracking import DependencyTracker
from inwire._internal.transient import Factory, is_transient
from inwire._internal.validators import suggest_key
from inwire.exceptions import (
    InwireCircularDependencyError,
    InwireError,
    InwireFactoryError,
    InwireProviderNotFoundError,
    InwireUndefinedReturnError,
)

logger = logging.getLogger(__name__)


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class Resolver:
    """Resolve dependency keys lazily and keep per-container state.

    A resolver owns a registry of factories, an insertion-ordered singleton
    cache, the dependency graph discovered while factories run, the set of
    initialized keys and a list of diagnostic warnings. Keys missing from the
    local registry fall through to ``parent``; the parent's state is never
    mutated by a child.

    ``resolve`` is fully synchronous. Lifecycle hooks returning awaitables are
    either scheduled in the background (ordinary access) or handed back to the
    caller (``call_on_init``), depending on the explicit ``defer_failures``
    flag of ``trigger_on_init``.
    """

    def __init__(
        self,
        factories: Mapping[str, Factory],
        cache: Mapping[str, Any] | None = None,
        parent: Resolver | None = None,
        name: str | None = None,
        initialized: Iterable[str] = (),
    ) -> None:
        """Initialize a resolver.

        Args:
            factories: Local registry. Each factory receives a tracking accessor.
            cache: Optional seed for the singleton cache. The mapping is copied.
            parent: Resolver consulted for keys missing from ``factories``.
            name: Optional name used in logs and introspection.
            initialized: Keys whose ``on_init`` already ran on the seeded cache values.

        """
        self._factories: dict[str, Factory] = dict(factories)
        self._cache: dict[str, Any] = dict(cache or {})
        self._parent = parent
        self._name = name
        self._cycle_detector = CycleDetector()
        self._tracker = DependencyTracker()
        self._init_called: set[str] = {key for key in initialized if key in self._cache}
        self._warnings: list[ContainerWarning] = []
        self._defer_on_init = False
        self._pending_inits: set[asyncio.Task[Any]] = set()

    @property
    def parent(self) -> Resolver | None:
        return self._parent

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def defer_on_init(self) -> bool:
        return self._defer_on_init

    def resolve(self, key: str, chain: Sequence[str] | None = None) -> Any:
        """Return the value for ``key``, building it on a cache miss.

        Args:
            key: Dependency key to resolve.
            chain: Keys resolved on the way to ``key``, used for diagnostics.

        Raises:
            InwireProviderNotFoundError: ``key`` is not registered here or in a parent.
            InwireCircularDependencyError: ``key`` is already being resolved.
            InwireUndefinedReturnError: The factory returned ``None``.
            InwireFactoryError: The factory raised an unexpected exception.

        """
        factory = self._factories.get(key)
        if factory is not None and not is_transient(factory) and key in self._cache:
            return self._cache[key]

        parent_chain = list(chain or ())
        current_chain = [*parent_chain, key]

        if factory is None:
            if self._parent is not None and self._parent.has_provider(key):
                return self._parent.resolve(key, parent_chain)
            registered = self.get_all_registered_keys()
            raise InwireProviderNotFoundError(
                key,
                chain=current_chain,
                registered=registered,
                suggestion=suggest_key(key, registered),
            )

        if self._cycle_detector.is_resolving(key):
            raise InwireCircularDependencyError(key, chain=current_chain)

        with self._cycle_detector.guard(key):
            try:
                return self._create(key, factory, current_chain)
            except InwireError:
                raise
            except Exception as exc:
                raise InwireFactoryError(key, exc, chain=current_chain) from exc

    def _create(self, key: str, factory: Factory, chain: list[str]) -> Any:
        deps: list[str] = []
        accessor = self._tracker.create_tracking_accessor(deps, chain, self.resolve)
        logger.debug("Invoking factory for '%s' (chain: %s)", key, " -> ".join(chain))

        instance = factory(accessor)
        if instance is None:
            raise InwireUndefinedReturnError(key, chain=chain)

        self._tracker.record_deps(key, deps)

        if is_transient(factory):
            # Every transient value is a fresh instance and gets its own hook call.
            if has_on_init(instance):
                self.trigger_on_init(key, instance, defer_failures=True)
            return instance

        for dep in deps:
            if self.is_transient(dep):
                self._add_warning(scope_mismatch_warning(key, dep))

        self._cache[key] = instance

        if not self._defer_on_init and key not in self._init_called and has_on_init(instance):
            self._init_called.add(key)
            try:
                self.trigger_on_init(key, instance, defer_failures=True)
            except Exception:
                self._cache.pop(key, None)
                self._init_called.discard(key)
                raise

        return instance

    def trigger_on_init(
        self,
        key: str,
        instance: Any,
        *,
        defer_failures: bool,
    ) -> Awaitable[Any] | None:
        """Invoke ``instance.on_init()``.

        Synchronous failures always propagate. When the hook returns an
        awaitable and ``defer_failures`` is true, it is scheduled without being
        awaited and a failure is recorded as an ``async_init_error`` warning.
        Otherwise the awaitable is returned for the caller to await.
        """
        result = instance.on_init()
        if not inspect.isawaitable(result):
            return None
        if not defer_failures:
            return result
        self._schedule_background_init(key, result)
        return None

    def _schedule_background_init(self, key: str, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to hand the hook to: drive it to completion right here.
            try:
                asyncio.run(_await(awaitable))
            except Exception as exc:  # noqa: BLE001
                self._record_async_init_error(key, exc)
            return

        task = loop.create_task(_await(awaitable))
        self._pending_inits.add(task)
        task.add_done_callback(functools.partial(self._on_background_init_done, key))

    def _on_background_init_done(self, key: str, task: asyncio.Task[Any]) -> None:
        self._pending_inits.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._record_async_init_error(key, error)

    def _record_async_init_error(self, key: str, error: BaseException) -> None:
        self._add_warning(async_init_error_warning(key, error))

    def _add_warning(self, warning: ContainerWarning) -> None:
        logger.warning("%s", warning.message)
        self._warnings.append(warning)

    async def wait_for_pending_inits(self) -> None:
        """Wait until every background ``on_init`` scheduled by ``resolve`` has finished."""
        while self._pending_inits:
            await asyncio.gather(*self._pending_inits, return_exceptions=True)

    async def call_on_init(self, key: str) -> None:
        """Run ``on_init`` for a cached value unless it already ran.

        Does nothing for keys that are not cached (transient keys are never
        cached) or whose value has no ``on_init``. A failed hook leaves the key
        uninitialized so a later call runs it again.
        """
        if key in self._init_called or key not in self._cache:
            return
        instance = self._cache[key]
        if not has_on_init(instance):
            return

        self._init_called.add(key)
        try:
            result = self.trigger_on_init(key, instance, defer_failures=False)
            if result is not None:
                await result
        except BaseException:
            self._init_called.discard(key)
            raise

    def set_defer_on_init(self, value: bool) -> None:  # noqa: FBT001
        self._defer_on_init = value

    def has_provider(self, key: str) -> bool:
        """Return true when ``key`` is registered here or in any parent."""
        return self._lookup_factory(key) is not None

    def is_transient(self, key: str) -> bool:
        """Return true when the factory serving ``key`` (locally or in a parent) is transient."""
        factory = self._lookup_factory(key)
        return factory is not None and is_transient(factory)

    def _lookup_factory(self, key: str) -> Factory | None:
        factory = self._factories.get(key)
        if factory is None and self._parent is not None:
            return self._parent._lookup_factory(key)  # noqa: SLF001
        return factory

    def is_resolved(self, key: str) -> bool:
        return key in self._cache

    def get_resolved_keys(self) -> list[str]:
        return list(self._cache)

    def get_factories(self) -> dict[str, Factory]:
        return dict(self._factories)

    def get_cache(self) -> dict[str, Any]:
        return dict(self._cache)

    def get_initialized_keys(self) -> list[str]:
        return [key for key in self._cache if key in self._init_called]

    def get_dep_graph(self) -> dict[str, list[str]]:
        return self._tracker.get_dep_graph()

    def get_all_registered_keys(self) -> list[str]:
        """Return local keys followed by ancestor keys not shadowed locally."""
        keys = list(self._factories)
        if self._parent is not None:
            seen = set(keys)
            keys.extend(key for key in self._parent.get_all_registered_keys() if key not in seen)
        return keys

    def get_warnings(self) -> list[ContainerWarning]:
        return list(self._warnings)

    def evict(self, *keys: str) -> None:
        for key in keys:
            self._cache.pop(key, None)

    def clear_cache(self) -> None:
        self._cache.clear()

    def clear_init_state(self, *keys: str) -> None:
        self._init_called.difference_update(keys)

    def clear_all_init_state(self) -> None:
        self._init_called.clear()

    def clear_dep_graph(self, *keys: str) -> None:
        self._tracker.clear_dep_graph(*keys)

    def clear_all_dep_graph(self) -> None:
        self._tracker.clear_all_dep_graph()

    def clear_warnings(self) -> None:
        self._warnings.clear()

    def clear_warnings_for_keys(self, *keys: str) -> None:
        self._warnings = [warning for warning in self._warnings if not warning.references_any(keys)]

    def reset(self, *keys: str) -> None:
        """Return keys to the registered state; without keys, reset everything.

        Cached values, init flags, dependency graph entries and warnings for the
        keys are dropped. ``on_destroy`` is not called and parents are untouched.
        """
        if not keys:
            self.clear_cache()
            self.clear_all_init_state()
            self.clear_all_dep_graph()
            self.clear_warnings()
            return

        self.evict(*keys)
        self.clear_init_state(*keys)
        self.clear_dep_graph(*keys)
        self.clear_warnings_for_keys(*keys)

    def __repr__(self) -> str:
        name = f" {self._name!r}" if self._name else ""
        return f"<Resolver{name} factories={len(self._factories)} cached={len(self._cache)}>"
