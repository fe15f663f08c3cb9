"""Public loader facade wiring registry, bus, checker, orchestrator and resolver.

Single resources::

    loader = UnitLoader(ModuleBackend())
    loader.load("plugins/metrics.py", callback=on_loaded)

Named resources and readiness::

    loader.load(["core-a.py", "core-b.py"], "core")
    loader.ready("core", on_core_ready)

Declared dependencies::

    loader.declare({"app": ["core"]}, {"app": ["app.py"], "core": ["core.py"]})
    loader.require("app", start)      # loads core.py, then app.py, then start()
    loader.unrequire("core")          # unloads app, then core

All state lives in a ``SharedState`` (the process-wide one by default), so
loaders of the same resource type created at different times share their
registry, declarations and pending callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from depload.core.dependency.graph import DeclarationMap, DependencyGraph
from depload.core.dependency.resolver import Resolver
from depload.core.loading.models import ResourceHandle, check_name, to_list
from depload.core.loading.orchestrator import Listener, LoadOrchestrator
from depload.core.readiness.bus import ReadinessBus, Subscriber
from depload.core.readiness.checker import Checker, UnknownHandler
from depload.core.registry.names import NameRegistry
from depload.core.registry.state import GLOBAL_STATE, SharedState
from depload.resources.base import ResourceBackend

logger = logging.getLogger(__name__)

BUS_KEY = "readiness-bus"


def _names(names: str | Iterable[str]) -> list[str]:
    return [check_name(n) for n in to_list(names)]


class UnitLoader:
    """Dependency-aware loader for named code units.

    Args:
        backend: Fetch capability used to create and destroy resources.
        state: Where shared tables live. Defaults to the process-wide state;
            pass a fresh ``SharedState()`` for an independent loader.
    """

    def __init__(self, backend: ResourceBackend, state: SharedState | None = None) -> None:
        state = state if state is not None else GLOBAL_STATE
        self._backend = backend
        self._registry = NameRegistry(backend.type, state)
        self._graph = DependencyGraph(backend.type, state)
        self._bus: ReadinessBus = state.setdefault(BUS_KEY, ReadinessBus)
        self._checker = Checker(backend, self._registry, self._bus)
        self._orchestrator = LoadOrchestrator(
            backend, self._registry, self._checker, self._bus, state
        )
        self._resolver = Resolver(
            self._graph, self._orchestrator, self._checker, self._registry, backend, state
        )

    # -- Accessors ----------------------------------------------------------

    @property
    def backend(self) -> ResourceBackend:
        return self._backend

    @property
    def registry(self) -> NameRegistry:
        return self._registry

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    @property
    def bus(self) -> ReadinessBus:
        return self._bus

    # -- Loading ------------------------------------------------------------

    def load(
        self,
        identifiers: str | Iterable[str],
        name: str | Subscriber | None = None,
        callback: Subscriber | None = None,
    ) -> None:
        """Load one or more identifiers, optionally as a name.

        - Identifiers already loading or loaded are not loaded again; unload
          the name first to force a reload.
        - ``callback`` runs once all identifiers are loaded, on every call.
        - Loading a name with other identifiers than before switches
          versions: the previous identifiers are unloaded once the new ones
          have loaded.

        The callback may be passed as the second argument when no name is
        needed: ``load("a.py", on_loaded)``.
        """
        if callable(name):
            name, callback = None, name
        if name:
            check_name(name)
        self._orchestrator.load(identifiers, name or None, callback)

    def unload(self, name: str) -> None:
        """Unload the identifiers registered for ``name``."""
        self._orchestrator.unload(name)

    def get(self, identifier: str, callback: Subscriber | None = None) -> ResourceHandle:
        """Unconditionally load one identifier, bypassing names and dedup.

        A resource loaded this way cannot be unloaded by name.
        """
        return self._orchestrator.get(identifier, callback)

    def prefetch(self, identifiers: str | Iterable[str]) -> None:
        """Warm one or more identifiers without loading them."""
        self._orchestrator.prefetch(identifiers)

    def discover(self) -> list[ResourceHandle]:
        """Register named resources that are already present."""
        return self._orchestrator.discover()

    def path(self, paths: str | Mapping[str, str] | None) -> None:
        """Set the identifier prefix or replacement map on the backend."""
        self._backend.set_path(paths)

    # -- Readiness ----------------------------------------------------------

    def ready(
        self,
        names: str | Iterable[str],
        on_ready: Subscriber | None = None,
        on_unknown: UnknownHandler | None = None,
    ) -> None:
        """Run ``on_ready`` once all ``names`` are loaded.

        ``on_unknown`` receives the names that have never been loaded or
        marked done, so that the caller can load them lazily.
        """
        self._checker.ready(_names(names), on_ready, on_unknown)

    def done(self, name: str) -> None:
        """Mark ``name`` as ready without loading anything."""
        self._orchestrator.done(check_name(name))

    def ignore(self, names: str | Iterable[str], fn: Subscriber) -> None:
        """Cancel a pending callback.

        ``names`` must be the same set passed to ``ready`` (or the name
        passed to ``load``) when ``fn`` was registered.
        """
        self._checker.ignore(_names(names), fn)

    def is_ready(self, names: str | Iterable[str]) -> bool:
        return all(self._checker.all_loaded(n) for n in to_list(names))

    def check(self) -> None:
        """Run every pending callback whose names are now loaded."""
        self._checker.check()

    # -- Dependencies -------------------------------------------------------

    def declare(self, deps: DeclarationMap | None, aliases: DeclarationMap | None = None) -> None:
        """Merge dependency and identifier declarations used by ``require``."""
        for name in list(deps or ()) + list(aliases or ()):
            check_name(name)
        self._graph.declare(deps, aliases)

    def require(self, names: str | Iterable[str], callback: Subscriber | None = None) -> None:
        """Load names after recursively loading their declared dependencies."""
        self._resolver.require(_names(names), callback)

    def unrequire(self, names: str | Iterable[str]) -> None:
        """Unload names after recursively unloading their dependents."""
        self._resolver.unrequire(_names(names))

    # -- Events -------------------------------------------------------------

    def add_listener(self, fn: Listener) -> None:
        """Receive ``LoadEvent``s for before-unload and unload."""
        self._orchestrator.add_listener(fn)

    def remove_listener(self, fn: Listener) -> None:
        self._orchestrator.remove_listener(fn)
