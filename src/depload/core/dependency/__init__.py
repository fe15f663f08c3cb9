"""Declared dependency graph and the recursive require/unrequire walk."""

from depload.core.dependency.graph import DependencyGraph
from depload.core.dependency.resolver import Resolver

__all__ = [
    "DependencyGraph",
    "Resolver",
]
