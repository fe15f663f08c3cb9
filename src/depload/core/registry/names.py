"""Name registry: the current identifier set for every logical name.

At most one identifier set is current for a name. ``set`` replaces the
previous set wholesale, so callers that need the old set for teardown must
read it first.
"""

from __future__ import annotations

from collections.abc import Iterable

from depload.core.registry.state import GLOBAL_STATE, SharedState

NAMES_KEY = "{type}-names"


class NameRegistry:
    """Maps names (and pseudonyms) to identifier lists for one resource type.

    The backing dictionary lives in ``SharedState`` so that it survives
    across independent loader instances of the same type.

    Args:
        resource_type: Resource type the registry belongs to (e.g. "py").
        state: State store holding the map. Defaults to the process-wide one.
    """

    def __init__(self, resource_type: str, state: SharedState | None = None) -> None:
        self._type = resource_type
        state = state if state is not None else GLOBAL_STATE
        self._map: dict[str, list[str]] = state.setdefault(
            NAMES_KEY.format(type=resource_type), dict
        )

    @property
    def type(self) -> str:
        return self._type

    def set(self, name: str, identifiers: Iterable[str]) -> None:
        self._map[name] = list(identifiers)

    def get(self, name: str) -> list[str] | None:
        """Return a copy of the identifiers registered for ``name``, or None."""
        identifiers = self._map.get(name)
        return list(identifiers) if identifiers is not None else None

    def clear(self, name: str) -> None:
        self._map.pop(name, None)

    def names(self) -> list[str]:
        return list(self._map)

    def __contains__(self, name: object) -> bool:
        return name in self._map
