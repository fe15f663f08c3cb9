"""Load orchestration: dedup, naming, version switching and teardown.

The orchestrator turns "load these identifiers as this name" into backend
calls and a readiness subscription:

1. Canonicalise the identifiers.
2. If the name currently has other identifiers, arrange for them to be
   destroyed *after* the new ones finish loading.
3. Register the identifiers under the name (or a pseudonym for unnamed
   loads) and subscribe the callback to that name's topic.
4. Create each identifier the backend does not know yet; every completion
   runs ``Checker.check``, which fires whatever became ready.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from depload.core.loading.models import (
    BEFORE_UNLOAD,
    UNLOAD,
    LoadEvent,
    ResourceHandle,
    pseudonym,
    to_list,
)
from depload.core.readiness.bus import ReadinessBus, Subscriber
from depload.core.readiness.checker import Checker
from depload.core.registry.names import NameRegistry
from depload.core.registry.state import GLOBAL_STATE, SharedState

if TYPE_CHECKING:
    from depload.resources.base import ResourceBackend

logger = logging.getLogger(__name__)

Listener = Callable[[LoadEvent], object]

RETIRED_KEY = "{type}-retired"


class LoadOrchestrator:
    """Issues and deduplicates loads and unloads through a backend.

    Args:
        backend: Fetch capability that creates and destroys resources.
        registry: Name registry updated by loads and unloads.
        checker: Reconciliation pass run after every completion.
        bus: Bus that load callbacks are subscribed to.
        state: Where the parked identifier sets live. Defaults to the
            process-wide state.
    """

    def __init__(
        self,
        backend: ResourceBackend,
        registry: NameRegistry,
        checker: Checker,
        bus: ReadinessBus,
        state: SharedState | None = None,
    ) -> None:
        state = state if state is not None else GLOBAL_STATE
        self._backend = backend
        self._registry = registry
        self._checker = checker
        self._bus = bus
        self._listeners: list[Listener] = []
        # Identifier sets replaced by a newer version of their name and still
        # waiting for that version to finish loading before teardown.
        self._retired: dict[str, list[str]] = state.setdefault(
            RETIRED_KEY.format(type=backend.type), dict
        )

    # -- Events -------------------------------------------------------------

    def add_listener(self, fn: Listener) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: Listener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def _dispatch(self, kind: str, name: str, identifiers: Iterable[str]) -> None:
        event = LoadEvent(kind=kind, name=name, identifiers=tuple(identifiers))
        for fn in list(self._listeners):
            fn(event)

    # -- Loading ------------------------------------------------------------

    def load(
        self,
        identifiers: str | Iterable[str],
        name: str | None = None,
        callback: Subscriber | None = None,
    ) -> None:
        """Load ``identifiers``, optionally as ``name``, then run ``callback``.

        Identifiers that are already loading or loaded are not fetched again,
        but the callback still runs once they are all loaded. Loading a name
        with different identifiers than it currently has switches versions:
        the previous identifiers are destroyed after the new ones load.
        """
        identifiers = [self._backend.canonicalize(i) for i in to_list(identifiers)]
        logger.debug("load %s %s", identifiers, name or "")
        done = callback

        if name:
            previous = self._registry.get(name)
            loaded = all(self._backend.loaded(i) for i in identifiers)
            if previous is not None and previous != identifiers and not loaded:
                self._dispatch(BEFORE_UNLOAD, name, previous)
                self._registry.clear(name)
                self._park(name, previous)
            if name in self._retired:
                done = self._after(name, callback)

        key = name or pseudonym(identifiers)
        self._registry.set(key, identifiers)
        if done is not None:
            topic = self._checker.topic_for([key])
            logger.debug("  subscribing %s", topic)
            self._bus.subscribe(topic, done)

        if not identifiers:
            self._checker.check()
        for identifier in identifiers:
            # Already loading or loaded: nothing to fetch, but this load's
            # own topic may be satisfied now.
            if self._backend.exists(identifier):
                self._checker.check()
            else:
                self._backend.create(identifier, self._checker.check, name=name)

    def _after(self, name: str, callback: Subscriber | None) -> Subscriber:
        """Wrap ``callback`` so that the parked set of ``name`` is torn down first.

        The set stays parked until this runs, so an ``unload`` in between
        still finds and destroys it; a later run then finds nothing.
        """

        def switch() -> None:
            self._teardown(name, self._retired.pop(name, []))
            if callback is not None:
                callback()

        return switch

    def _park(self, name: str, identifiers: list[str]) -> None:
        parked = self._retired.setdefault(name, [])
        parked += [i for i in identifiers if i not in parked]

    def retire(self, name: str) -> None:
        """Take ``name`` off the registry, deferring its teardown.

        The identifiers are destroyed once the next ``load`` of ``name``
        finishes, or immediately on ``unload(name)``.
        """
        previous = self._registry.get(name)
        if previous is None:
            return
        self._dispatch(BEFORE_UNLOAD, name, previous)
        self._registry.clear(name)
        self._park(name, previous)

    def done(self, name: str) -> None:
        """Mark ``name`` ready without any identifiers behind it."""
        self._registry.set(name, [])
        self._checker.check()

    def get(self, identifier: str, callback: Subscriber | None = None) -> ResourceHandle:
        """Create ``identifier`` unconditionally, without dedup or naming."""
        return self._backend.create(identifier, callback)

    def prefetch(self, identifiers: str | Iterable[str]) -> None:
        for identifier in to_list(identifiers):
            self._backend.prefetch(identifier)

    def discover(self) -> list[ResourceHandle]:
        """Register resources that were already present under their names."""
        handles = self._backend.discover()
        found: dict[str, list[str]] = {}
        for handle in handles:
            logger.debug("  found %s %s", handle.identifier, handle.name or "")
            if handle.name:
                found.setdefault(handle.name, []).append(handle.identifier)
        for name, identifiers in found.items():
            self._registry.set(name, identifiers)
        return handles

    # -- Unloading ----------------------------------------------------------

    def unload(self, name: str) -> None:
        """Forget ``name`` and destroy its identifiers.

        Pending callbacks for the name will not fire unless it is loaded
        again. Fetches already in flight are not cancelled by the engine.
        """
        logger.info("unload %s", name)
        identifiers = self._registry.get(name) or []
        self._registry.clear(name)
        retired = self._retired.pop(name, [])
        identifiers += [i for i in retired if i not in identifiers]
        self._teardown(name, identifiers)

    def _teardown(self, name: str, identifiers: list[str]) -> None:
        # Identifiers the name still owns (shared with its new version) stay.
        keep = set(self._registry.get(name) or ())
        doomed = [i for i in identifiers if i not in keep]
        if not doomed:
            return
        logger.info("  > unload %s %s", name, doomed)
        self._dispatch(UNLOAD, name, doomed)
        for identifier in doomed:
            self._backend.destroy(identifier)
