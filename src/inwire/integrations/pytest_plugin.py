"""pytest plugin exposing ``inwire_container`` and ``inwire`` fixtures.

Enable it with ``pytest_plugins = ["inwire.integrations.pytest_plugin"]``.
"""

from inwire._internal.integrations.pytest_plugin import (
    INWIRE_PRELOAD_MARKER,
    inwire,
    inwire_container,
    pytest_configure,
)

__all__ = [
    "INWIRE_PRELOAD_MARKER",
    "inwire",
    "inwire_container",
    "pytest_configure",
]
