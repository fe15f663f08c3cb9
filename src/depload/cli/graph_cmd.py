"""``depload graph`` / ``depload dependents`` -- Inspect a dependency manifest.

``graph`` prints every declared name with its dependencies and identifiers
and lists dependency cycles. ``dependents`` prints the order in which
unrequiring a name would unload it and everything depending on it.

Exit Codes:
    0 -- Manifest inspected; for ``graph``, no cycles were found.
    1 -- ``graph`` found one or more dependency cycles.
    2 -- The manifest could not be read or is invalid.
"""

from __future__ import annotations

import sys

import click

from depload.core.dependency import DependencyGraph
from depload.core.registry import SharedState
from depload.exceptions import ManifestError
from depload.manifest import load_manifest


def _graph_from(manifest: str) -> DependencyGraph:
    try:
        parsed = load_manifest(manifest)
    except ManifestError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    graph = DependencyGraph("manifest", SharedState())
    graph.declare(parsed.deps, parsed.aliases)
    return graph


@click.command("graph")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
def graph_command(manifest: str) -> None:
    """Show the dependencies declared in MANIFEST and any cycles."""
    from depload.cli.output import print_graph

    graph = _graph_from(manifest)
    cycles = graph.detect_cycles()
    print_graph(graph, cycles)
    sys.exit(1 if cycles else 0)


@click.command("dependents")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
def dependents_command(manifest: str, name: str) -> None:
    """Show the unload order for unrequiring NAME under MANIFEST."""
    from depload.cli.output import print_teardown

    graph = _graph_from(manifest)
    print_teardown(name, graph.teardown_order([name]))
    sys.exit(0)
