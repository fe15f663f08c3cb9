"""Process-wide key/value state shared by loader instances.

Tables that must outlive a single ``UnitLoader`` (the name registry, the
dependency and alias maps, the readiness bus) are stored here by key and
always fetched by reference, never copied. Two loaders built on the same
``SharedState`` therefore see each other's declarations and registrations;
a loader built on a fresh ``SharedState()`` is fully independent.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class SharedState:
    """A small dictionary wrapper with ``setdefault``-style seeding."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def has(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> Any:
        self._values[key] = value
        return value

    def setdefault(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the value under ``key``, seeding it from ``factory`` if absent."""
        if key not in self._values:
            self._values[key] = factory()
        return self._values[key]

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()


GLOBAL_STATE = SharedState()
