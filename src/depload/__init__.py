"""depload: Dependency-aware loading and readiness notification for named code units."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
