"""Base class for resource backends (the fetch capability).

A backend knows how to turn an identifier into a loaded resource and how to
throw it away again. The loader engine only talks to backends through this
interface:

- ``create`` / ``destroy`` -- start loading a resource / forget it.
- ``exists`` / ``loaded`` / ``status`` -- per-identifier bookkeeping.
- ``canonicalize`` / ``set_path`` -- identifier normalisation and rewriting.
- ``discover`` -- resources already present before the engine started.
- ``prefetch`` -- warm a resource without loading it.

Bookkeeping lives here; concrete backends implement ``_fetch`` and may
override the ``_resolve``, ``_teardown``, ``_warm`` and ``_existing`` hooks.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from depload.core.loading.models import LoadStatus, ResourceHandle

logger = logging.getLogger(__name__)

Finish = Callable[[Any], None]


class ResourceBackend(ABC):
    """Abstract fetch capability with status tracking and path rewriting.

    Subclasses set ``type`` (used to namespace registry state and readiness
    topics) and implement ``_fetch``. ``_fetch`` receives the new handle and
    a ``finish`` callable; it must call ``finish(value)`` exactly once when
    the resource is ready, synchronously or later. A fetch that fails
    should log and never call ``finish``.
    """

    type: str = ""

    def __init__(self) -> None:
        self._status: dict[str, LoadStatus] = {}
        self._handles: dict[str, ResourceHandle] = {}
        self._prefix: str = ""
        self._replacements: dict[str, str] = {}
        self._canonical: dict[str, str] = {}

    # -- Identifier normalisation -------------------------------------------

    def set_path(self, paths: str | Mapping[str, str] | None) -> None:
        """Set a prefix for relative identifiers or a replacement mapping.

        A string is prepended to identifiers that are not already absolute.
        A mapping replaces every occurrence of each key with its value; the
        order in which replacements are applied is not guaranteed. ``None``
        removes any rewriting.
        """
        if paths is None:
            self._prefix, self._replacements = "", {}
        elif isinstance(paths, str):
            self._prefix, self._replacements = paths, {}
        else:
            self._prefix, self._replacements = "", dict(paths)
        self._canonical.clear()

    def canonicalize(self, identifier: str) -> str:
        """Return the canonical form of ``identifier``.

        Idempotent: an identifier this backend already produced as a
        canonical form is returned unchanged.
        """
        if not identifier:
            return identifier
        cached = self._canonical.get(identifier)
        if cached is not None:
            return cached
        if identifier in self._canonical.values():
            return identifier
        rewritten = identifier
        for old, new in self._replacements.items():
            rewritten = rewritten.replace(old, new)
        if self._prefix and not self._is_absolute(rewritten):
            rewritten = self._prefix + rewritten
        canonical = self._resolve(rewritten)
        self._canonical[identifier] = canonical
        return canonical

    def _is_absolute(self, identifier: str) -> bool:
        return identifier.startswith("/") or "://" in identifier

    def _resolve(self, identifier: str) -> str:
        return identifier

    # -- Status -------------------------------------------------------------

    def status(self, identifier: str) -> LoadStatus:
        """Return the load status; falsy identifiers are always LOADED."""
        if not identifier:
            return LoadStatus.LOADED
        return self._status.get(self._key(identifier), LoadStatus.UNREQUESTED)

    def exists(self, identifier: str) -> bool:
        """True if the identifier is loading or loaded."""
        return self.status(identifier) is not LoadStatus.UNREQUESTED

    def loaded(self, identifier: str) -> bool:
        return self.status(identifier) is LoadStatus.LOADED

    def handle(self, identifier: str) -> ResourceHandle | None:
        return self._handles.get(self._key(identifier))

    def _key(self, identifier: str) -> str:
        # Tracked identifiers are already canonical; rewriting them again
        # after a later set_path would lose them.
        if identifier in self._status or identifier in self._handles:
            return identifier
        return self.canonicalize(identifier)

    # -- Lifecycle ----------------------------------------------------------

    def create(
        self,
        identifier: str,
        on_complete: Callable[[], object] | None = None,
        name: str | None = None,
    ) -> ResourceHandle:
        """Unconditionally start loading ``identifier``.

        Args:
            identifier: Resource identifier (canonicalised here).
            on_complete: Called with no arguments once the resource loaded.
            name: Optional logical name recorded on the handle.

        Returns:
            The new ``ResourceHandle``.

        Raises:
            Whatever ``_fetch`` raises. Tracking for the identifier is then
            left as it was before the call.
        """
        canonical = self.canonicalize(identifier)
        handle = ResourceHandle(identifier=canonical, type=self.type)
        if name:
            handle.attributes["name"] = name
        previous = self._handles.get(canonical), self._status.get(canonical)
        self._handles[canonical] = handle
        self._status[canonical] = LoadStatus.LOADING

        def finish(value: Any = None) -> None:
            # A destroyed or re-created resource must not be marked loaded
            # by a fetch that was started before.
            if self._handles.get(canonical) is handle:
                handle.value = value
                self._status[canonical] = LoadStatus.LOADED
                logger.debug("loaded %s", canonical)
            else:
                logger.debug("stale completion for %s ignored", canonical)
            if on_complete is not None:
                on_complete()

        try:
            self._fetch(handle, finish)
        except Exception:
            # Nothing was started; put back whatever was tracked before.
            if self._handles.get(canonical) is handle:
                self._restore(canonical, *previous)
            raise
        return handle

    def _restore(
        self, canonical: str, handle: ResourceHandle | None, status: LoadStatus | None
    ) -> None:
        if handle is None:
            self._handles.pop(canonical, None)
            self._status.pop(canonical, None)
        else:
            self._handles[canonical] = handle
            self._status[canonical] = status or LoadStatus.LOADING

    def destroy(self, identifier: str) -> None:
        """Forget ``identifier``; it reads as UNREQUESTED afterwards."""
        canonical = self._key(identifier)
        self._status.pop(canonical, None)
        handle = self._handles.pop(canonical, None)
        if handle is not None:
            self._teardown(handle)

    def prefetch(self, identifier: str) -> None:
        """Warm ``identifier`` without loading it or tracking a status."""
        canonical = self.canonicalize(identifier)
        if canonical and not self.exists(canonical):
            self._warm(canonical)

    def discover(self) -> list[ResourceHandle]:
        """Report resources already present and track them as LOADED."""
        found: list[ResourceHandle] = []
        for handle in self._existing():
            if handle.identifier not in self._handles:
                self._handles[handle.identifier] = handle
                self._status[handle.identifier] = LoadStatus.LOADED
            found.append(handle)
        return found

    # -- Hooks --------------------------------------------------------------

    @abstractmethod
    def _fetch(self, handle: ResourceHandle, finish: Finish) -> None:
        """Start fetching the resource behind ``handle``."""

    def _teardown(self, handle: ResourceHandle) -> None:
        """Release whatever ``_fetch`` produced for ``handle``."""

    def _warm(self, identifier: str) -> None:
        """Fetch ``identifier`` into a cache without executing it."""

    def _existing(self) -> Iterable[ResourceHandle]:
        return ()
