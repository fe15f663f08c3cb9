"""Readiness waiting and the reconciliation pass that fires it.

``Checker.check`` is run after every single-identifier completion and after
every ``done``. It walks all topics this engine has pending, parses each
back into its names, and flushes the ones whose names are all loaded.

Because loading a name's dependencies subscribes a continuation that itself
loads (and therefore checks) again, a publish-style delivery would loop:

    require -> load (subscribe) -> check (publish) -> load (subscribe) -> ...

Flushing detaches the subscribers before invoking them, so the continuation
can subscribe and check freely without ever seeing itself again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from depload.core.loading.models import TOPIC_SEPARATOR, to_list
from depload.core.readiness.bus import ReadinessBus, Subscriber
from depload.core.registry.names import NameRegistry

if TYPE_CHECKING:
    from depload.resources.base import ResourceBackend

logger = logging.getLogger(__name__)

UnknownHandler = Callable[[list[str]], object]


class Checker:
    """Evaluates readiness of names and topics against live load state.

    Args:
        backend: Fetch capability answering per-identifier ``loaded``.
        registry: Name registry holding each name's identifier set.
        bus: Bus holding pending readiness subscriptions.
    """

    def __init__(
        self,
        backend: ResourceBackend,
        registry: NameRegistry,
        bus: ReadinessBus,
    ) -> None:
        self._backend = backend
        self._registry = registry
        self._bus = bus
        self._prefix = f"{backend.type}:"

    @property
    def prefix(self) -> str:
        """Private topic prefix for this engine's resource type."""
        return self._prefix

    def topic_for(self, names: Iterable[str]) -> str:
        """Build the topic shared by every wait on the same set of names."""
        return self._prefix + TOPIC_SEPARATOR.join(sorted(names))

    def names_from_topic(self, topic: str) -> list[str]:
        return topic[len(self._prefix):].split(TOPIC_SEPARATOR)

    def all_loaded(self, name: str) -> bool:
        """True if ``name`` is registered and all its identifiers are loaded.

        Falsy names are always loaded.
        """
        if not name:
            return True
        identifiers = self._registry.get(name)
        if identifiers is None:
            return False
        return all(self._backend.loaded(i) for i in identifiers)

    def ready(
        self,
        names: str | Iterable[str],
        on_ready: Subscriber | None = None,
        on_unknown: UnknownHandler | None = None,
    ) -> None:
        """Run ``on_ready`` once every name is loaded.

        If all names are registered and loaded, ``on_ready`` runs now.
        Otherwise it is subscribed to the topic of the sorted name list. If
        some names are not registered at all, ``on_unknown`` is called with
        exactly those names, whether or not the others are loaded yet.
        """
        names = to_list(names)
        logger.debug("ready %s", names)
        unknown = [n for n in names if n and n not in self._registry]
        if on_ready is not None:
            if not unknown and all(self.all_loaded(n) for n in names):
                on_ready()
            else:
                topic = self.topic_for(names)
                logger.debug("  subscribing %s", topic)
                self._bus.subscribe(topic, on_ready)
        if on_unknown is not None and unknown:
            on_unknown(unknown)

    def ignore(self, names: str | Iterable[str], fn: Subscriber) -> None:
        """Cancel a pending ``fn`` subscribed for exactly this set of names."""
        topic = self.topic_for(to_list(names))
        logger.debug("ignore %s", topic)
        self._bus.unsubscribe(topic, fn)

    def check(self) -> None:
        """Flush every pending topic whose names are now all loaded."""
        for topic in self._bus.topics(self._prefix):
            if not self._bus.has_subscribers(topic):
                continue
            names = self.names_from_topic(topic)
            if all(self.all_loaded(n) for n in names):
                logger.debug("  flushing %s", topic)
                self._bus.flush(topic)
