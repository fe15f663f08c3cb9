"""Load orchestration and the data models shared across the engine."""

from depload.core.loading.models import (
    BEFORE_UNLOAD,
    PSEUDONYM_MARKER,
    TOPIC_SEPARATOR,
    UNLOAD,
    LoadEvent,
    LoadStatus,
    ResourceHandle,
    check_name,
    pseudonym,
    to_list,
)
from depload.core.loading.orchestrator import LoadOrchestrator

__all__ = [
    "BEFORE_UNLOAD",
    "PSEUDONYM_MARKER",
    "TOPIC_SEPARATOR",
    "UNLOAD",
    "LoadEvent",
    "LoadOrchestrator",
    "LoadStatus",
    "ResourceHandle",
    "check_name",
    "pseudonym",
    "to_list",
]
