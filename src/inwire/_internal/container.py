from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Any

from inwire._internal.disposer import Disposer
from inwire._internal.introspection import (
    ContainerGraph,
    ContainerHealth,
    ProviderInfo,
    describe_provider,
    inspect_resolver,
    resolver_health,
)
from inwire._internal.preloader import Preloader
from inwire._internal.resolver import Resolver
from inwire._internal.transient import Factory, as_factory
from inwire._internal.validators import RegistrationValidator

if TYPE_CHECKING:
    from typing_extensions import Self


class Container:
    """Expose a resolver through attribute access and lifecycle operations.

    Keys map to factories receiving a dependency accessor, or to plain values
    which are wrapped automatically. Values are built on first access and
    cached unless their factory is marked with ``transient``.

    Examples:
        .. code-block:: python

            container = Container(
                {
                    "config": {"dsn": "postgres://localhost/app"},
                    "db": lambda c: Database(c.config["dsn"]),
                    "users": lambda c: UserRepository(c.db),
                },
            )

            await container.preload()
            users = container.users
            await container.dispose()

    """

    _validator = RegistrationValidator()

    def __init__(self, deps: Mapping[str, object] | None = None, *, name: str | None = None) -> None:
        """Initialize a container.

        Args:
            deps: Mapping of keys to factories or plain values.
            name: Optional name reported by ``inspect`` and in logs.

        Raises:
            InwireInvalidRegistrationError: A key is reserved or invalid, or a value is ``None``.

        """
        self._resolver = Resolver(self._normalize(deps or {}), name=name)

    @classmethod
    def _from_resolver(cls, resolver: Resolver) -> Self:
        container = cls.__new__(cls)
        container._resolver = resolver
        return container

    def _normalize(self, deps: Mapping[str, object]) -> dict[str, Factory]:
        self._validator.validate_config(deps)
        return {key: as_factory(value) for key, value in deps.items()}

    @property
    def name(self) -> str | None:
        return self._resolver.name

    @property
    def resolver(self) -> Resolver:
        """The resolver backing this container."""
        return self._resolver

    def resolve(self, key: str) -> Any:
        return self._resolver.resolve(key)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._resolver.resolve(name)

    def __getitem__(self, key: str) -> Any:
        return self._resolver.resolve(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._resolver.has_provider(key)

    def scope(self, extra: Mapping[str, object], *, name: str | None = None) -> Container:
        """Create a child container with extra or overriding providers.

        The child falls back to this container for keys it does not register.
        Its singletons are independent: resetting or disposing the child never
        touches this container.
        """
        child = Resolver(self._normalize(extra), parent=self._resolver, name=name)
        return self._from_resolver(child)

    def extend(self, extra: Mapping[str, object]) -> Container:
        """Return a new container with the providers of this one plus ``extra``.

        Singletons already cached here are shared with the new container,
        except for keys that ``extra`` overrides, and keep their ``on_init`` state so
        hooks that already ran are not repeated. This container is unchanged.
        """
        factories = {**self._resolver.get_factories(), **self._normalize(extra)}
        cache = {key: value for key, value in self._resolver.get_cache().items() if key not in extra}
        resolver = Resolver(
            factories,
            cache=cache,
            parent=self._resolver.parent,
            name=self._resolver.name,
            initialized=self._resolver.get_initialized_keys(),
        )
        return self._from_resolver(resolver)

    async def preload(self, *keys: str) -> None:
        """Resolve ``keys`` (every local key when empty) and await their ``on_init`` hooks."""
        await Preloader(self._resolver).preload(keys or None)

    async def dispose(self) -> None:
        """Call ``on_destroy`` in reverse resolution order and clear all state."""
        await Disposer(self._resolver).dispose()

    def reset(self, *keys: str) -> None:
        """Drop cached values so the next access rebuilds them; all keys when empty."""
        self._resolver.reset(*keys)

    def inspect(self) -> ContainerGraph:
        return inspect_resolver(self._resolver)

    def describe(self, key: str) -> ProviderInfo:
        return describe_provider(self._resolver, key)

    def health(self) -> ContainerHealth:
        return resolver_health(self._resolver)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.dispose()

    def __repr__(self) -> str:
        name = f" {self.name!r}" if self.name else ""
        resolved = self._resolver.get_resolved_keys()
        return f"<Container{name} providers={list(self._resolver.get_factories())} resolved={resolved}>"
