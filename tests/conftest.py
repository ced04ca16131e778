"""Shared pytest fixtures for inwire tests."""

from __future__ import annotations

import pytest

from inwire import Container, Resolver


@pytest.fixture()
def chain_resolver() -> Resolver:
    """Resolver with a three-step chain ``c -> b -> a``."""
    return Resolver(
        {
            "a": lambda _: 1,
            "b": lambda d: d.a + 1,
            "c": lambda d: d.b + 1,
        },
    )


@pytest.fixture()
def cyclic_container() -> Container:
    """Container where ``a`` and ``b`` read each other and ``x`` stands alone."""
    return Container(
        {
            "a": lambda d: d.b,
            "b": lambda d: d.a,
            "x": lambda _: "standalone",
        },
    )
