"""Readiness notification: the pub/sub bus and the checker that drives it."""

from depload.core.readiness.bus import ReadinessBus, Subscriber
from depload.core.readiness.checker import Checker

__all__ = [
    "Checker",
    "ReadinessBus",
    "Subscriber",
]
