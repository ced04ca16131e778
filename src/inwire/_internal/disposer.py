from __future__ import annotations

import inspect
import logging

from inwire._internal.lifecycle import has_on_destroy
from inwire._internal.resolver import Resolver
from inwire.exceptions import InwireAggregateError

logger = logging.getLogger(__name__)


class Disposer:
    """Tear down a resolver's cached values in reverse resolution order."""

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    async def dispose(self) -> None:
        """Call ``on_destroy`` on every cached value, last resolved first.

        A failing hook does not stop the others. Afterwards the cache, init
        state, dependency graph and warnings are cleared whether or not any
        hook failed.

        Raises:
            Exception: The only ``on_destroy`` failure, unchanged.
            InwireAggregateError: Several ``on_destroy`` hooks failed.

        """
        resolver = self._resolver
        errors: list[Exception] = []
        try:
            for key, instance in reversed(resolver.get_cache().items()):
                if not has_on_destroy(instance):
                    continue
                try:
                    result = instance.on_destroy()
                    if inspect.isawaitable(result):
                        await result
                except Exception as exc:
                    logger.warning("on_destroy() of '%s' failed: %s: %s", key, type(exc).__name__, exc)
                    errors.append(exc)
        finally:
            resolver.clear_cache()
            resolver.clear_all_init_state()
            resolver.clear_all_dep_graph()
            resolver.clear_warnings()

        if not errors:
            logger.debug("Disposed resolver %r", resolver)
            return
        if len(errors) == 1:
            raise errors[0]
        msg = "Multiple on_destroy() hooks failed during dispose"
        raise InwireAggregateError(msg, errors)
