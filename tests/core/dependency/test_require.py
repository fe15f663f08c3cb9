"""Tests for the Resolver: dependency-first require, transitive unrequire,
version switching through declarations, and cycle guards.
"""

from __future__ import annotations

from depload.core.loading import BEFORE_UNLOAD, UNLOAD


class TestRequire:
    """Tests for require()."""

    def test_undeclared_name_loads_itself(self, loader, backend, recorder) -> None:
        cb = recorder()
        loader.require("lib.js", cb)
        assert backend.created == ["lib.js"]
        assert loader.registry.get("lib.js") == ["lib.js"]
        backend.complete("lib.js")
        assert cb.calls == 1

    def test_alias_identifiers_used(self, loader, backend) -> None:
        loader.declare({}, {"core": ["core-1.py", "core-2.py"]})
        loader.require("core")
        assert backend.created == ["core-1.py", "core-2.py"]
        assert loader.registry.get("core") == ["core-1.py", "core-2.py"]

    def test_dependency_loaded_before_dependent(self, loader, backend, recorder) -> None:
        loader.declare({"A": ["B"]}, {"A": ["a.py"], "B": ["b.py"]})
        cb = recorder()
        loader.require("A", cb)
        assert backend.created == ["b.py"]
        backend.complete("b.py")
        assert backend.created == ["b.py", "a.py"]
        assert cb.calls == 0
        backend.complete("a.py")
        assert cb.calls == 1

    def test_siblings_start_together(self, loader, backend) -> None:
        loader.declare({"app": ["x", "y"]})
        loader.require("app")
        assert backend.created == ["x", "y"]
        backend.complete("y", "x")
        assert backend.created == ["x", "y", "app"]

    def test_deep_chain(self, loader, backend, recorder) -> None:
        loader.declare({"A": ["B"], "B": ["C"]})
        cb = recorder()
        loader.require("A", cb)
        backend.complete("C")
        backend.complete("B")
        backend.complete("A")
        assert backend.created == ["C", "B", "A"]
        assert cb.calls == 1

    def test_synchronous_backend(self, sync_loader, sync_backend, recorder) -> None:
        sync_loader.declare({"app": ["core"]}, {"app": "app.py", "core": "core.py"})
        cb = recorder()
        sync_loader.require("app", cb)
        assert sync_backend.created == ["core.py", "app.py"]
        assert cb.calls == 1
        assert sync_loader.bus.topics() == []

    def test_require_already_ready_fires_immediately(self, sync_loader, recorder) -> None:
        sync_loader.require("a")
        cb = recorder()
        sync_loader.require("a", cb)
        assert cb.calls == 1

    def test_shared_dependency_loaded_once(self, loader, backend, recorder) -> None:
        loader.declare({"A": ["C"], "B": ["C"]})
        cb = recorder()
        loader.require(["A", "B"], cb)
        assert backend.created == ["C"]
        backend.complete("C")
        assert sorted(backend.created) == ["A", "B", "C"]
        backend.complete("A", "B")
        assert cb.calls == 1

    def test_concurrent_require_of_pending_name(self, loader, backend, recorder) -> None:
        loader.declare({"A": ["B"]})
        first, second = recorder(), recorder()
        loader.require("A", first)
        loader.require("A", second)
        backend.complete("B")
        backend.complete("A")
        assert backend.created == ["B", "A"]
        assert (first.calls, second.calls) == (1, 1)

    def test_done_satisfies_dependency(self, loader, backend, recorder) -> None:
        loader.declare({"A": ["flag"]}, {"flag": []})
        cb = recorder()
        loader.require("A", cb)
        backend.complete("A")
        assert cb.calls == 1
        assert loader.registry.get("flag") == []


class TestUnrequire:
    """Tests for unrequire()."""

    def test_dependents_unloaded_first(self, sync_loader) -> None:
        sync_loader.declare({"A": ["B"], "B": ["C"]})
        sync_loader.require("A")
        unloaded = []
        sync_loader.add_listener(lambda e: unloaded.append(e.name) if e.kind == UNLOAD else None)
        sync_loader.unrequire("C")
        assert unloaded == ["A", "B", "C"]
        assert sync_loader.registry.names() == []

    def test_diamond_unloads_each_once(self, sync_loader, sync_backend) -> None:
        sync_loader.declare({"A": ["B", "C"], "B": ["D"], "C": ["D"]})
        sync_loader.require("A")
        sync_loader.unrequire("D")
        assert sorted(sync_backend.destroyed) == ["A", "B", "C", "D"]

    def test_unrequire_leaves_dependencies(self, sync_loader, sync_backend) -> None:
        sync_loader.declare({"A": ["B"]})
        sync_loader.require("A")
        sync_loader.unrequire("A")
        assert sync_backend.destroyed == ["A"]
        assert sync_loader.registry.get("B") == ["B"]

    def test_unrequire_cycle_terminates(self, sync_loader, sync_backend) -> None:
        sync_loader.declare({"A": ["B"], "B": ["A"]})
        sync_loader.done("A")
        sync_loader.load("b.py", "B")
        sync_loader.unrequire("A")
        assert sync_backend.destroyed == ["b.py"]
        assert sync_loader.registry.names() == []

    def test_unrequire_then_require_reloads(self, sync_loader, sync_backend) -> None:
        sync_loader.declare({"A": ["B"]})
        sync_loader.require("A")
        sync_loader.unrequire("B")
        sync_loader.require("A")
        assert sync_backend.created == ["B", "A", "B", "A"]


class TestVersionChange:
    """Tests for redeclared identifiers of a registered name."""

    def test_old_version_destroyed_after_new_loads(self, loader, backend, recorder) -> None:
        loader.declare({}, {"X": ["a"]})
        loader.require("X")
        backend.complete("a")
        loader.declare({}, {"X": ["b"]})
        cb = recorder()
        loader.require("X", cb)
        assert backend.created == ["a", "b"]
        assert backend.destroyed == []
        assert cb.calls == 0
        backend.complete("b")
        assert backend.destroyed == ["a"]
        assert cb.calls == 1
        assert loader.registry.get("X") == ["b"]

    def test_dependents_unrequired_on_switch(self, sync_loader, sync_backend) -> None:
        sync_loader.declare({"app": ["core"]}, {"core": ["core-1"]})
        sync_loader.require("app")
        sync_loader.declare({}, {"core": ["core-2"]})
        sync_loader.require("core")
        assert sync_backend.destroyed == ["app", "core-1"]
        assert sync_loader.registry.get("app") is None
        assert sync_loader.registry.get("core") == ["core-2"]

    def test_before_unload_dispatched_on_switch(self, loader, backend) -> None:
        events = []
        loader.add_listener(events.append)
        loader.declare({}, {"X": ["a"]})
        loader.require("X")
        backend.complete("a")
        loader.declare({}, {"X": ["b"]})
        loader.require("X")
        assert [(e.kind, e.identifiers) for e in events] == [(BEFORE_UNLOAD, ("a",))]

    def test_unload_during_switch_destroys_both(self, loader, backend) -> None:
        loader.declare({}, {"X": ["a"]})
        loader.require("X")
        backend.complete("a")
        loader.declare({}, {"X": ["b"]})
        loader.require("X")
        loader.unload("X")
        assert sorted(backend.destroyed) == ["a", "b"]

    def test_done_name_never_counts_as_changed(self, loader, backend, recorder) -> None:
        loader.done("flag")
        cb = recorder()
        loader.require("flag", cb)
        assert cb.calls == 1
        assert backend.created == []


class TestCycleGuard:
    """Tests for require() over a declared cycle."""

    def test_cycle_does_not_recurse(self, loader, backend, recorder) -> None:
        loader.declare({"A": ["B"], "B": ["A"]})
        cb = recorder()
        loader.require("A", cb)
        assert backend.created == []
        assert cb.calls == 0

    def test_cycle_broken_by_done(self, loader, backend, recorder) -> None:
        loader.declare({"A": ["B"], "B": ["A"]})
        cb = recorder()
        loader.require("A", cb)
        loader.done("A")
        backend.complete("B")
        assert cb.calls == 1
