from inwire._internal.container import Container
from inwire._internal.diagnostics import ContainerWarning, WarningKind
from inwire._internal.disposer import Disposer
from inwire._internal.introspection import ContainerGraph, ContainerHealth, ProviderInfo
from inwire._internal.lifecycle import OnDestroy, OnInit
from inwire._internal.preloader import Preloader
from inwire._internal.resolver import Resolver
from inwire._internal.transient import Lifetime, transient
from inwire.exceptions import (
    InwireAggregateError,
    InwireCircularDependencyError,
    InwireError,
    InwireFactoryError,
    InwireInvalidRegistrationError,
    InwireProviderNotFoundError,
    InwireUndefinedReturnError,
)

__all__ = [
    "Container",
    "ContainerGraph",
    "ContainerHealth",
    "ContainerWarning",
    "Disposer",
    "InwireAggregateError",
    "InwireCircularDependencyError",
    "InwireError",
    "InwireFactoryError",
    "InwireInvalidRegistrationError",
    "InwireProviderNotFoundError",
    "InwireUndefinedReturnError",
    "Lifetime",
    "OnDestroy",
    "OnInit",
    "Preloader",
    "ProviderInfo",
    "Resolver",
    "WarningKind",
    "transient",
]
