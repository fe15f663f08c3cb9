"""Persistent name registry and the process-wide state it lives in."""

from depload.core.registry.names import NameRegistry
from depload.core.registry.state import GLOBAL_STATE, SharedState

__all__ = [
    "GLOBAL_STATE",
    "NameRegistry",
    "SharedState",
]
