from __future__ import annotations

from dataclasses import dataclass

from inwire._internal.diagnostics import ContainerWarning
from inwire._internal.resolver import Resolver
from inwire._internal.transient import Lifetime, is_transient


@dataclass(frozen=True, slots=True)
class ProviderInfo:
    """Snapshot of one local provider."""

    key: str
    resolved: bool
    deps: tuple[str, ...]
    lifetime: Lifetime


@dataclass(frozen=True, slots=True)
class ContainerGraph:
    """Snapshot of every local provider of a container."""

    name: str | None
    providers: dict[str, ProviderInfo]


@dataclass(frozen=True, slots=True)
class ContainerHealth:
    """Resolution progress and diagnostics of a container."""

    total_providers: int
    resolved: tuple[str, ...]
    unresolved: tuple[str, ...]
    warnings: tuple[ContainerWarning, ...]


def describe_provider(resolver: Resolver, key: str) -> ProviderInfo:
    """Describe ``key`` as seen by ``resolver``; unknown keys get an empty singleton entry."""
    factory = resolver.get_factories().get(key)
    deps = resolver.get_dep_graph().get(key, []) if factory is not None else []
    return ProviderInfo(
        key=key,
        resolved=resolver.is_resolved(key) if factory is not None else False,
        deps=tuple(deps),
        lifetime=Lifetime.TRANSIENT if factory is not None and is_transient(factory) else Lifetime.SINGLETON,
    )


def inspect_resolver(resolver: Resolver) -> ContainerGraph:
    return ContainerGraph(
        name=resolver.name,
        providers={key: describe_provider(resolver, key) for key in resolver.get_factories()},
    )


def resolver_health(resolver: Resolver) -> ContainerHealth:
    keys = list(resolver.get_factories())
    return ContainerHealth(
        total_providers=len(keys),
        resolved=tuple(key for key in resolver.get_resolved_keys() if key in keys),
        unresolved=tuple(key for key in keys if not resolver.is_resolved(key)),
        warnings=tuple(resolver.get_warnings()),
    )
