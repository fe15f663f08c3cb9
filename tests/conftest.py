"""Shared fixtures for depload tests.

``DeferredBackend`` stands in for a real fetch capability: creating a
resource only records it, and the test decides when (and in which order)
each identifier completes.
"""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from depload.core.engine import UnitLoader
from depload.core.loading.models import ResourceHandle
from depload.core.registry import SharedState
from depload.resources.base import Finish, ResourceBackend


class DeferredBackend(ResourceBackend):
    """In-memory backend whose loads complete when the test says so.

    Args:
        sync: Complete every load immediately, inside ``create``.

    Set ``error`` to make ``_fetch`` raise it instead of starting the load.
    """

    type = "test"

    def __init__(self, sync: bool = False) -> None:
        super().__init__()
        self.sync = sync
        self.error: Exception | None = None
        self.pending: dict[str, Finish] = {}
        self.created: list[str] = []
        self.destroyed: list[str] = []
        self.warmed: list[str] = []
        self.existing: list[ResourceHandle] = []

    def _fetch(self, handle: ResourceHandle, finish: Finish) -> None:
        if self.error is not None:
            raise self.error
        self.created.append(handle.identifier)
        if self.sync:
            finish(f"value:{handle.identifier}")
        else:
            self.pending[handle.identifier] = finish

    def complete(self, *identifiers: str) -> None:
        for identifier in identifiers:
            self.pending.pop(identifier)(f"value:{identifier}")

    def complete_all(self) -> None:
        while self.pending:
            self.complete(next(iter(self.pending)))

    def _teardown(self, handle: ResourceHandle) -> None:
        self.destroyed.append(handle.identifier)

    def _warm(self, identifier: str) -> None:
        self.warmed.append(identifier)

    def _existing(self) -> Iterable[ResourceHandle]:
        return list(self.existing)


class Recorder:
    """Callable that counts its invocations and logs them to a shared list."""

    def __init__(self, label: str = "", log: list[str] | None = None) -> None:
        self.label = label
        self.calls = 0
        self.log = log if log is not None else []

    def __call__(self) -> None:
        self.calls += 1
        self.log.append(self.label)


@pytest.fixture
def state() -> SharedState:
    """A fresh, isolated state store."""
    return SharedState()


@pytest.fixture
def backend() -> DeferredBackend:
    """Backend whose loads complete only when the test completes them."""
    return DeferredBackend()


@pytest.fixture
def sync_backend() -> DeferredBackend:
    """Backend whose loads complete immediately."""
    return DeferredBackend(sync=True)


@pytest.fixture
def loader(backend: DeferredBackend, state: SharedState) -> UnitLoader:
    """Loader over the deferred backend and an isolated state."""
    return UnitLoader(backend, state)


@pytest.fixture
def sync_loader(sync_backend: DeferredBackend, state: SharedState) -> UnitLoader:
    """Loader whose resources finish loading synchronously."""
    return UnitLoader(sync_backend, state)


@pytest.fixture
def recorder() -> type[Recorder]:
    """The ``Recorder`` class, for building counting callbacks."""
    return Recorder


@pytest.fixture
def backend_factory() -> type[DeferredBackend]:
    """The ``DeferredBackend`` class, for tests that need several backends."""
    return DeferredBackend
