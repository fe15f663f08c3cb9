"""``depload require <manifest> <name>...`` -- Load names with their dependencies.

Reads a dependency manifest, declares it on a fresh loader backed by
``ModuleBackend``, requires the given names, and reports the order in which
names became ready.

Exit Codes:
    0 -- Every requested name became ready.
    1 -- At least one requested name did not become ready.
    2 -- The manifest could not be read or is invalid.
"""

from __future__ import annotations

import sys
from functools import partial
from pathlib import Path

import click

from depload.core.engine import UnitLoader
from depload.core.registry import SharedState
from depload.exceptions import DeploadError
from depload.manifest import load_manifest
from depload.resources import ModuleBackend


@click.command("require")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.argument("names", nargs=-1, required=True)
@click.option(
    "--base-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory module paths are resolved against (default: manifest's directory).",
)
@click.option("--json", "as_json", is_flag=True, help="Emit results as JSON.")
def require_command(
    manifest: str,
    names: tuple[str, ...],
    base_dir: str | None,
    as_json: bool,
) -> None:
    """Require NAMES from MANIFEST, loading dependencies first.

    Module files are executed in this process. Exit code 0 when every name
    became ready, 1 otherwise, 2 on an invalid manifest.
    """
    try:
        parsed = load_manifest(manifest)
        base = Path(base_dir) if base_dir else Path(manifest).resolve().parent
        loader = UnitLoader(ModuleBackend(base), SharedState())
        parsed.apply(loader)
    except DeploadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    order: list[str] = []
    try:
        for name in sorted(loader.graph.names | set(names)):
            loader.ready(name, partial(order.append, name))
        loader.require(list(names))
    except DeploadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    loaded = [(name, loader.registry.get(name) or []) for name in order]
    requested = {name: loader.is_ready(name) for name in names}

    if as_json:
        from depload.cli.output import print_json

        print_json({
            "order": [{"name": n, "identifiers": ids} for n, ids in loaded],
            "ready": requested,
        })
    else:
        from depload.cli.output import print_load_order

        print_load_order(loaded, requested)

    sys.exit(0 if all(requested.values()) else 1)
