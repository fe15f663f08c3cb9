"""Tests for NameRegistry and SharedState: replacement semantics and
sharing of tables across registry instances.
"""

from __future__ import annotations

from depload.core.registry import GLOBAL_STATE, NameRegistry, SharedState


class TestNameRegistry:
    """Tests for set/get/clear."""

    def test_get_absent_is_none(self) -> None:
        assert NameRegistry("py", SharedState()).get("x") is None

    def test_set_replaces_previous(self) -> None:
        registry = NameRegistry("py", SharedState())
        registry.set("x", ["a", "b"])
        registry.set("x", ["c"])
        assert registry.get("x") == ["c"]

    def test_get_returns_copy(self) -> None:
        registry = NameRegistry("py", SharedState())
        registry.set("x", ["a"])
        registry.get("x").append("b")
        assert registry.get("x") == ["a"]

    def test_empty_set_is_registered(self) -> None:
        registry = NameRegistry("py", SharedState())
        registry.set("x", [])
        assert registry.get("x") == []
        assert "x" in registry

    def test_clear(self) -> None:
        registry = NameRegistry("py", SharedState())
        registry.set("x", ["a"])
        registry.clear("x")
        registry.clear("never-set")
        assert registry.get("x") is None
        assert registry.names() == []


class TestSharing:
    """Tests for state shared by reference."""

    def test_same_state_same_type_shares_map(self) -> None:
        state = SharedState()
        first = NameRegistry("py", state)
        second = NameRegistry("py", state)
        first.set("x", ["a"])
        assert second.get("x") == ["a"]

    def test_types_are_isolated(self) -> None:
        state = SharedState()
        NameRegistry("py", state).set("x", ["a"])
        assert NameRegistry("css", state).get("x") is None

    def test_default_is_global_state(self) -> None:
        registry = NameRegistry("registry-test-type")
        try:
            registry.set("x", [])
            assert GLOBAL_STATE.get("registry-test-type-names") == {"x": []}
        finally:
            GLOBAL_STATE.delete("registry-test-type-names")


class TestSharedState:
    """Tests for the key/value store."""

    def test_setdefault_seeds_once(self) -> None:
        state = SharedState()
        first = state.setdefault("k", dict)
        second = state.setdefault("k", dict)
        assert first is second

    def test_has_set_delete(self) -> None:
        state = SharedState()
        assert not state.has("k")
        state.set("k", 1)
        assert state.has("k") and state.get("k") == 1
        state.delete("k")
        assert state.get("k", "missing") == "missing"
