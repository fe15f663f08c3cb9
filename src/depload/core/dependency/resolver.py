"""Recursive require/unrequire over the declared dependency graph.

``require`` loads a name's declared dependencies before the name itself,
depth first; sibling names are walked without waiting for each other.
``unrequire`` tears down every transitive dependent before the name.

When a registered name's identifiers differ from what is declared now, the
name is switched to the new version: its dependents are unrequired, and its
old identifiers are destroyed only once the new ones have loaded.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from depload.core.dependency.graph import DependencyGraph
from depload.core.loading.models import to_list
from depload.core.loading.orchestrator import LoadOrchestrator
from depload.core.readiness.bus import Subscriber
from depload.core.readiness.checker import Checker
from depload.core.registry.names import NameRegistry
from depload.core.registry.state import GLOBAL_STATE, SharedState

if TYPE_CHECKING:
    from depload.resources.base import ResourceBackend

logger = logging.getLogger(__name__)

RESOLVING_KEY = "{type}-resolving"


class Resolver:
    """Dependency-ordered loading and unloading of names.

    Args:
        graph: Declared dependencies and identifier overrides.
        orchestrator: Issues the loads and unloads.
        checker: Readiness waiting.
        registry: Current identifier set per name.
        backend: Used to canonicalise declared identifiers.
        state: Where the set of in-flight names lives. Defaults to the
            process-wide state.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        orchestrator: LoadOrchestrator,
        checker: Checker,
        registry: NameRegistry,
        backend: ResourceBackend,
        state: SharedState | None = None,
    ) -> None:
        state = state if state is not None else GLOBAL_STATE
        self._graph = graph
        self._orchestrator = orchestrator
        self._checker = checker
        self._registry = registry
        self._backend = backend
        # Names whose dependency walk is in flight. A name found here is not
        # walked again, which also stops a declared cycle from recursing.
        self._resolving: set[str] = state.setdefault(
            RESOLVING_KEY.format(type=backend.type), set
        )

    @property
    def resolving(self) -> set[str]:
        return set(self._resolving)

    def require(self, names: str | Iterable[str], callback: Subscriber | None = None) -> None:
        """Load ``names`` and their dependencies, then run ``callback`` once."""
        names = to_list(names)
        logger.debug("require %s", names)
        for name in names:
            if name and self._changed(name):
                self._switch(name)
        self._checker.ready(names, callback, self._resolve)

    def unrequire(self, names: str | Iterable[str]) -> None:
        """Unload ``names`` after unloading everything that depends on them."""
        names = to_list(names)
        logger.debug("unrequire %s", names)
        for name in self._graph.teardown_order(names):
            self._resolving.discard(name)
            self._orchestrator.unload(name)

    def _changed(self, name: str) -> bool:
        """True if ``name`` is registered with other identifiers than declared.

        Names registered with no identifiers (see ``done``) never count as
        changed.
        """
        current = self._registry.get(name)
        if not current:
            return False
        declared = [self._backend.canonicalize(i) for i in self._graph.identifiers_for(name)]
        return current != declared

    def _switch(self, name: str) -> None:
        logger.debug("  switching %s", name)
        dependents = [n for n in self._graph.teardown_order([name]) if n != name]
        for dependent in dependents:
            self._resolving.discard(dependent)
            self._orchestrator.unload(dependent)
        self._resolving.discard(name)
        self._orchestrator.retire(name)

    def _resolve(self, names: list[str]) -> None:
        """Walk unknown names: dependencies first, then the name's own load."""
        for name in names:
            if name in self._resolving:
                logger.debug("  already resolving %s", name)
                continue
            deps = self._graph.dependencies_of(name)
            identifiers = self._graph.identifiers_for(name)

            def load_name(name: str = name, identifiers: list[str] = identifiers) -> None:
                self._resolving.discard(name)
                self._orchestrator.load(identifiers, name)

            if deps:
                self._resolving.add(name)
                self.require(deps, load_name)
            else:
                load_name()
