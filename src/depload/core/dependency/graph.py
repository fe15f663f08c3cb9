"""Declared dependency graph and identifier overrides.

Two tables make up the graph:

- **deps**: name -> ordered list of names it needs loaded first.
- **aliases**: name -> ordered list of identifiers to load for it, used
  instead of the name itself.

Both are merged into by ``declare`` (later declarations overwrite only the
names they mention) and never pruned automatically. They live in
``SharedState`` and are shared by reference across loader instances of the
same resource type.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from depload.core.loading.models import to_list
from depload.core.registry.state import GLOBAL_STATE, SharedState

logger = logging.getLogger(__name__)

DEPS_KEY = "{type}-deps"
ALIASES_KEY = "{type}-aliases"

DeclarationMap = Mapping[str, "str | Iterable[str]"]


class DependencyGraph:
    """Mutable name-level dependency graph for one resource type.

    The graph supports:
    - Merging declarations (``declare``)
    - Forward and reverse edge queries
    - Teardown ordering (dependents before the names they depend on)
    - Cycle detection via DFS coloring

    Thread safety: This class is NOT thread-safe. External synchronization is
    required for concurrent access.
    """

    def __init__(self, resource_type: str, state: SharedState | None = None) -> None:
        state = state if state is not None else GLOBAL_STATE
        self._deps: dict[str, list[str]] = state.setdefault(
            DEPS_KEY.format(type=resource_type), dict
        )
        self._aliases: dict[str, list[str]] = state.setdefault(
            ALIASES_KEY.format(type=resource_type), dict
        )

    @property
    def names(self) -> set[str]:
        """Return every name that has declared dependencies or identifiers."""
        return set(self._deps) | set(self._aliases)

    def declare(
        self,
        deps: DeclarationMap | None,
        aliases: DeclarationMap | None = None,
    ) -> None:
        """Merge dependency and identifier declarations into the graph.

        Values may be a single string or a sequence of strings. A name
        declared again replaces only its own previous entry.

        Args:
            deps: Mapping of name -> names it depends on.
            aliases: Mapping of name -> identifiers to load for it.
        """
        for name, value in (deps or {}).items():
            self._deps[name] = to_list(value)
        for name, value in (aliases or {}).items():
            self._aliases[name] = to_list(value)
        for cycle in self.detect_cycles():
            logger.warning("Dependency cycle declared: %s", " -> ".join(cycle))

    def dependencies_of(self, name: str) -> list[str]:
        """Return the direct dependencies declared for ``name``."""
        return list(self._deps.get(name, ()))

    def identifiers_for(self, name: str) -> list[str]:
        """Return the identifiers to load for ``name``.

        The alias override if one is declared (even an empty one), otherwise
        the name itself used as a literal identifier.
        """
        if name in self._aliases:
            return list(self._aliases[name])
        return [name]

    def dependents_of(self, name: str) -> list[str]:
        """Return the names whose dependency list directly contains ``name``."""
        return [dep for dep, needs in self._deps.items() if name in needs]

    def teardown_order(self, names: Iterable[str]) -> list[str]:
        """Order ``names`` and all their transitive dependents for unloading.

        Every dependent precedes the names it depends on, and each name
        appears exactly once. Cycles are cut at the first revisit.
        """
        order: list[str] = []
        visited: set[str] = set()

        def _visit(name: str) -> None:
            if name in visited:
                return
            visited.add(name)
            for dependent in self.dependents_of(name):
                _visit(dependent)
            order.append(name)

        for name in names:
            _visit(name)
        return order

    def detect_cycles(self) -> list[list[str]]:
        """Detect circular dependencies using DFS coloring.

        Returns:
            A list of cycles, where each cycle is a list of names forming
            the cycle path (e.g., ["A", "B", "A"]). Empty if no cycles.
        """
        all_names: set[str] = set(self._deps)
        for needs in self._deps.values():
            all_names.update(needs)

        WHITE, GRAY, BLACK = 0, 1, 2
        color: dict[str, int] = {n: WHITE for n in all_names}
        parent: dict[str, str | None] = {n: None for n in all_names}
        cycles: list[list[str]] = []

        def _dfs(u: str) -> None:
            color[u] = GRAY
            for v in self._deps.get(u, ()):
                if color[v] == GRAY:
                    # Back edge found: extract cycle
                    cycle = [v, u]
                    cur = parent[u]
                    while cur is not None and u != v and cur != v:
                        cycle.append(cur)
                        cur = parent[cur]
                    if u != v:
                        cycle.append(v)
                    cycle.reverse()
                    cycles.append(cycle)
                elif color[v] == WHITE:
                    parent[v] = u
                    _dfs(v)
            color[u] = BLACK

        for n in sorted(all_names):
            if color[n] == WHITE:
                _dfs(n)

        return cycles
