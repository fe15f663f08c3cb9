"""Load data models: statuses, handles, events, and argument normalisation.

Defines the core data structures shared by the orchestrator, the checker,
and the resource backends:

- ``LoadStatus`` -- per-identifier lifecycle (UNREQUESTED -> LOADING -> LOADED).
- ``ResourceHandle`` -- what a backend returns for a created resource.
- ``LoadEvent`` -- notification emitted before and during unloads.
- ``to_list`` / ``check_name`` -- normalisation of public arguments.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from depload.exceptions import InvalidNameError

# Prefix of synthesized names for unnamed loads. Caller names may not
# start with it, so pseudonyms never collide with declared names.
PSEUDONYM_MARKER = "^"

# Joins the sorted names of a multi-name readiness topic.
TOPIC_SEPARATOR = "|"

BEFORE_UNLOAD = "beforeunload"
UNLOAD = "unload"


class LoadStatus(Enum):
    """Lifecycle of a single identifier inside a resource backend.

    Status only moves forward, except that destroying a resource drops it
    out of tracking entirely, which reads as ``UNREQUESTED`` again.
    """

    UNREQUESTED = "unrequested"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass
class ResourceHandle:
    """A resource created by a backend.

    Attributes:
        identifier: Canonical identifier of the resource.
        type: Resource type of the backend that created it (e.g. "py").
        attributes: Free-form metadata; ``attributes["name"]`` holds the
            logical name the resource was loaded under, if any.
        value: Backend-specific payload (e.g. the executed module).
    """

    identifier: str
    type: str
    attributes: dict[str, str] = field(default_factory=dict)
    value: Any = None

    @property
    def name(self) -> str | None:
        """Logical name attached to this resource, if one was given."""
        return self.attributes.get("name")


@dataclass(frozen=True)
class LoadEvent:
    """Notification emitted by the orchestrator around unloads.

    Attributes:
        kind: ``"beforeunload"`` when a name's registration is replaced by
            a new version, ``"unload"`` right before its resources are
            destroyed.
        name: The affected name (or pseudonym).
        identifiers: The identifiers being replaced or destroyed.
    """

    kind: str
    name: str
    identifiers: tuple[str, ...]


def to_list(value: str | Iterable[str] | None) -> list[str]:
    """Normalise a "string or sequence of strings" argument to a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def check_name(name: str) -> str:
    """Reject names that would break topic addressing.

    Raises:
        InvalidNameError: If the name starts with the pseudonym marker or
            contains the topic separator.
    """
    if name.startswith(PSEUDONYM_MARKER):
        raise InvalidNameError(
            f"Name {name!r} starts with reserved marker {PSEUDONYM_MARKER!r}"
        )
    if TOPIC_SEPARATOR in name:
        raise InvalidNameError(
            f"Name {name!r} contains topic separator {TOPIC_SEPARATOR!r}"
        )
    return name


def pseudonym(identifiers: Iterable[str]) -> str:
    """Derive the reserved name shared by identical unnamed loads.

    Each identifier is percent-encoded, so the marker and the topic
    separator never appear inside a part and distinct sets never collide.
    """
    parts = sorted(quote(i, safe="/:") for i in identifiers)
    return PSEUDONYM_MARKER + PSEUDONYM_MARKER.join(parts)
