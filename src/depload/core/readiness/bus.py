"""Topic-addressed publish/subscribe bus used for readiness notification.

The bus is synchronous and in-memory, with no priorities. Its one
non-obvious primitive is ``flush``, which detaches a topic's whole
subscriber list *before* invoking anything. A subscriber that
re-enters the engine (and so ends up subscribing or checking again) can
therefore never be delivered twice from the same flush.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[], object]


class ReadinessBus:
    """Ordered, exactly-once subscriber lists keyed by topic string.

    Thread safety: This class is NOT thread-safe. The engine is
    single-threaded and cooperative.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscriber]] = {}

    def subscribe(self, topic: str, fn: Subscriber) -> None:
        """Append ``fn`` to the subscriber list of ``topic``."""
        self._subscriptions.setdefault(topic, []).append(fn)

    def unsubscribe(self, topic: str, fn: Subscriber) -> None:
        """Remove the first occurrence of ``fn`` from ``topic``.

        Missing topics or functions are ignored; cancellation is best-effort.
        """
        subscribers = self._subscriptions.get(topic)
        if not subscribers:
            return
        try:
            subscribers.remove(fn)
        except ValueError:
            return
        if not subscribers:
            del self._subscriptions[topic]

    def publish(self, topic: str) -> None:
        """Invoke every subscriber of ``topic`` without detaching them.

        Not used for readiness propagation: a subscriber that re-subscribes
        itself while being published would be invoked forever.
        """
        for fn in list(self._subscriptions.get(topic, ())):
            fn()

    def flush(self, topic: str) -> int:
        """Detach all subscribers of ``topic``, then invoke them in order.

        Subscriber exceptions propagate to the caller; subscribers after the
        failing one are not invoked and are not re-attached.

        Returns:
            The number of subscribers that were detached.
        """
        subscribers = self._subscriptions.pop(topic, [])
        logger.debug("flush %s (%d subscribers)", topic, len(subscribers))
        for fn in subscribers:
            fn()
        return len(subscribers)

    def topics(self, prefix: str = "") -> list[str]:
        """Return a snapshot of the topics that currently have subscribers."""
        return [t for t in self._subscriptions if t.startswith(prefix)]

    def has_subscribers(self, topic: str) -> bool:
        return bool(self._subscriptions.get(topic))

    def subscribers(self, topic: str) -> list[Subscriber]:
        """Return a copy of the subscriber list for ``topic``."""
        return list(self._subscriptions.get(topic, ()))

    def clear(self) -> None:
        self._subscriptions.clear()
