from __future__ import annotations

import asyncio
from collections.abc import Iterator

import pytest

from inwire._internal.container import Container

INWIRE_PRELOAD_MARKER = "inwire_preload"


@pytest.fixture()
def inwire_container() -> Container:
    """Fixture hook for the plugin-managed test container.

    Users must override this fixture in their own test suite and return a
    configured container.

    """
    msg = (
        "The inwire pytest plugin requires overriding the 'inwire_container' fixture in your "
        "test suite. Define @pytest.fixture() def inwire_container() -> Container: ... "
        "and return a configured container."
    )
    raise RuntimeError(msg)


@pytest.fixture()
def inwire(request: pytest.FixtureRequest, inwire_container: Container) -> Iterator[Container]:
    """Provide ``inwire_container`` with its lifecycle managed around the test.

    Keys listed in ``@pytest.mark.inwire_preload(...)`` are preloaded before the
    test runs, and the container is disposed during teardown. The fixture is
    synchronous: each lifecycle step runs on its own short-lived event loop.

    Yields:
        The container returned by ``inwire_container``.

    """
    marker = request.node.get_closest_marker(INWIRE_PRELOAD_MARKER)
    if marker is not None:
        asyncio.run(inwire_container.preload(*marker.args))
    try:
        yield inwire_container
    finally:
        asyncio.run(inwire_container.dispose())


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{INWIRE_PRELOAD_MARKER}(*keys): preload the given keys of the 'inwire' fixture "
        "before the test; no keys preloads every provider.",
    )
