"""depload CLI -- Dependency-aware loading of named code units.

Entry point for the ``depload`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    require    -- Load names from a manifest, dependencies first.
    graph      -- Show declared dependencies and cycles.
    dependents -- Show the unload order for unrequiring a name.

Usage::

    depload require deps.yaml app
    depload --verbose require deps.yaml app metrics
    depload graph deps.yaml
    depload dependents deps.yaml core
"""

from __future__ import annotations

import logging

import click

from depload import __version__
from depload.cli.graph_cmd import dependents_command, graph_command
from depload.cli.require_cmd import require_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log every loader operation.")
def cli(verbose: bool) -> None:
    """depload: Dependency-aware loading of named code units.

    Declare which names depend on which, map names to module files, and
    load them in dependency order with exactly-once readiness callbacks.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# Register all subcommands
cli.add_command(require_command)
cli.add_command(graph_command)
cli.add_command(dependents_command)
