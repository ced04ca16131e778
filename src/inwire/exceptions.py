from __future__ import annotations

from collections.abc import Sequence


class InwireError(Exception):
    """Represent a base class for all inwire-specific failures.

    Catch this type when you want to handle any inwire error path without
    matching each concrete exception class individually.
    """


class InwireInvalidRegistrationError(InwireError):
    """Signal an invalid factory mapping passed to a container.

    Raised by ``Container(...)``, ``Container.scope`` and ``Container.extend``
    when a key is reserved, is not a valid identifier, or maps to ``None``.

    Typical fixes include renaming the key or registering a factory instead of
    an empty value.
    """


class InwireProviderNotFoundError(InwireError, LookupError):
    """Signal that a key has no factory in the container or any parent scope.

    ``registered`` lists every key visible from the failing container and
    ``suggestion`` holds the closest registered key when one is near enough.
    """

    def __init__(
        self,
        key: str,
        *,
        chain: Sequence[str] = (),
        registered: Sequence[str] = (),
        suggestion: str | None = None,
    ) -> None:
        self.key = key
        self.chain = tuple(chain)
        self.registered = tuple(registered)
        self.suggestion = suggestion

        msg = f"Provider '{key}' not found."
        if suggestion is not None:
            msg += f" Did you mean '{suggestion}'?"
        if len(self.chain) > 1:
            msg += f" Resolution chain: {' -> '.join(self.chain)}."
        msg += f" Registered keys: [{', '.join(self.registered)}]."
        super().__init__(msg)


class InwireCircularDependencyError(InwireError):
    """Signal that a key was requested while it was still being resolved.

    ``chain`` is the cycle as observed, ending with the repeated key, for
    example ``("a", "b", "a")``.

    Typical fixes include breaking the cycle with a lazily resolved value or
    moving the shared state into a third provider.
    """

    def __init__(self, key: str, *, chain: Sequence[str]) -> None:
        self.key = key
        self.chain = tuple(chain)
        msg = f"Circular dependency detected while resolving '{key}': {' -> '.join(self.chain)}."
        super().__init__(msg)


class InwireUndefinedReturnError(InwireError):
    """Signal that a factory returned ``None``.

    A factory must produce a value. Return an explicit sentinel object when a
    dependency is intentionally empty.
    """

    def __init__(self, key: str, *, chain: Sequence[str] = ()) -> None:
        self.key = key
        self.chain = tuple(chain)
        msg = f"Factory '{key}' returned None."
        if len(self.chain) > 1:
            msg += f" Resolution chain: {' -> '.join(self.chain)}."
        super().__init__(msg)


class InwireFactoryError(InwireError):
    """Wrap an unexpected exception raised inside a factory body.

    The original exception is available as ``original`` and as ``__cause__``.
    inwire's own errors raised by nested resolutions are never wrapped.
    """

    def __init__(self, key: str, original: BaseException, *, chain: Sequence[str] = ()) -> None:
        self.key = key
        self.original = original
        self.chain = tuple(chain)
        msg = f"Factory '{key}' raised {type(original).__name__}: {original}"
        if len(self.chain) > 1:
            msg += f" (resolution chain: {' -> '.join(self.chain)})"
        super().__init__(msg)


class InwireAggregateError(InwireError):
    """Collect several failures from one batch lifecycle operation.

    Raised by ``preload`` and ``dispose`` when more than one ``on_init`` or
    ``on_destroy`` hook failed. A single failure is re-raised as is.
    """

    def __init__(self, message: str, errors: Sequence[BaseException]) -> None:
        self.errors = tuple(errors)
        details = "; ".join(f"{type(error).__name__}: {error}" for error in self.errors)
        super().__init__(f"{message} ({len(self.errors)} errors): {details}")
