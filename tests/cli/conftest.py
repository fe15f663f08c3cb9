"""Shared fixtures for CLI tests.

Provides a Click runner and temporary project directories holding module
files and the dependency manifests that describe them.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def _clean_modules() -> Iterator[None]:
    """Drop modules executed by ``depload require`` from sys.modules."""
    before = set(sys.modules)
    yield
    for key in set(sys.modules) - before:
        if key.startswith("_depload_"):
            del sys.modules[key]


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project where app needs core and metrics, and metrics needs core."""
    (tmp_path / "core.py").write_text("VALUE = 1\n")
    (tmp_path / "metrics.py").write_text("VALUE = 2\n")
    (tmp_path / "app.py").write_text("VALUE = 3\n")
    (tmp_path / "deps.yaml").write_text(
        "deps:\n"
        "  app: [core, metrics]\n"
        "  metrics: core\n"
        "aliases:\n"
        "  app: app.py\n"
        "  core: core.py\n"
        "  metrics: metrics.py\n"
    )
    return tmp_path


@pytest.fixture
def manifest(project_dir: Path) -> Path:
    return project_dir / "deps.yaml"


@pytest.fixture
def cyclic_manifest(tmp_path: Path) -> Path:
    """A manifest whose declarations form the cycle a -> b -> a."""
    path = tmp_path / "cyclic.yaml"
    path.write_text("deps:\n  a: b\n  b: a\n")
    return path


@pytest.fixture
def invalid_manifest(tmp_path: Path) -> Path:
    path = tmp_path / "invalid.yaml"
    path.write_text("deps: [not, a, mapping]\n")
    return path
