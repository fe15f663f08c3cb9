"""Dependency manifests: declarations and path rewriting read from YAML.

A manifest collects everything a loader needs before ``require`` is called::

    paths: ./lib/              # prefix, or a {old: new} replacement mapping
    deps:
      app: [core, metrics]
      metrics: core
    aliases:
      core: [core/base.py, core/extra.py]
      app: app.py

JSON is accepted too (it is valid YAML). Values may be a string or a list of
strings. Relative ``paths`` prefixes are left as written; backends resolve
them against their own base directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from depload.exceptions import ManifestError

if TYPE_CHECKING:
    from depload.core.engine import UnitLoader


@dataclass
class Manifest:
    """Parsed dependency manifest.

    Attributes:
        deps: Name -> names it depends on.
        aliases: Name -> identifiers to load for it.
        paths: Identifier prefix, replacement mapping, or None.
        source: File the manifest was read from, if any.
    """

    deps: dict[str, list[str]] = field(default_factory=dict)
    aliases: dict[str, list[str]] = field(default_factory=dict)
    paths: str | dict[str, str] | None = None
    source: Path | None = None

    def apply(self, loader: UnitLoader) -> None:
        """Install the manifest's paths and declarations on ``loader``."""
        if self.paths is not None:
            loader.path(self.paths)
        loader.declare(self.deps, self.aliases)


def _string_lists(data: Any, section: str) -> dict[str, list[str]]:  # noqa: ANN401
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ManifestError(f"Section {section!r} must be a mapping")
    result: dict[str, list[str]] = {}
    for name, value in data.items():
        if isinstance(value, str):
            result[str(name)] = [value]
        elif isinstance(value, list) and all(isinstance(v, str) for v in value):
            result[str(name)] = list(value)
        else:
            raise ManifestError(
                f"{section}.{name} must be a string or a list of strings"
            )
    return result


def parse_manifest(text: str, source: Path | None = None) -> Manifest:
    """Parse manifest text.

    Raises:
        ManifestError: If the text is not valid YAML or has the wrong shape.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Invalid manifest: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError("Manifest must be a mapping")

    paths = data.get("paths")
    if paths is not None and not isinstance(paths, (str, dict)):
        raise ManifestError("'paths' must be a string or a mapping")
    if isinstance(paths, dict):
        paths = {str(k): str(v) for k, v in paths.items()}

    return Manifest(
        deps=_string_lists(data.get("deps"), "deps"),
        aliases=_string_lists(data.get("aliases"), "aliases"),
        paths=paths,
        source=source,
    )


def load_manifest(path: str | Path) -> Manifest:
    """Read and parse a manifest file.

    Raises:
        ManifestError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    return parse_manifest(text, source=path)
