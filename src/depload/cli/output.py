"""Rich output formatting helpers for the depload CLI.

Provides consistent terminal output for load orders, declared dependency
graphs, cycles, and teardown orders.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from depload.core.dependency import DependencyGraph

console = Console()


def print_load_order(
    loaded: list[tuple[str, list[str]]],
    requested: dict[str, bool],
) -> None:
    """Print the order in which names became ready and the requested outcome.

    Args:
        loaded: (name, identifiers) pairs in the order they became ready.
        requested: Requested name -> whether it became ready.
    """
    ok = all(requested.values())
    if ok:
        console.print(Panel("[bold green]All names ready[/bold green]", title="Require"))
    else:
        console.print(Panel("[bold red]Some names not ready[/bold red]", title="Require"))

    if loaded:
        table = Table(title="Load Order", show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Identifiers")
        for index, (name, identifiers) in enumerate(loaded, start=1):
            table.add_row(str(index), name, "\n".join(identifiers) or "-")
        console.print(table)
    else:
        console.print("[dim]Nothing was loaded.[/dim]")

    for name in sorted(requested):
        if requested[name]:
            status = Text("READY", style="bold green")
        else:
            status = Text("PENDING", style="bold red")
        console.print(f"  {name}: ", status)


def print_graph(graph: DependencyGraph, cycles: list[list[str]]) -> None:
    """Print the declared dependencies and identifiers for every name."""
    if not graph.names:
        console.print("[dim]No declarations found.[/dim]")
        return

    table = Table(title="Declared Dependencies", show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Depends On")
    table.add_column("Identifiers", style="dim")
    for name in sorted(graph.names):
        deps = graph.dependencies_of(name)
        table.add_row(name, ", ".join(deps) or "-", ", ".join(graph.identifiers_for(name)))
    console.print(table)

    if cycles:
        console.print(f"[bold red]{len(cycles)} dependency cycle(s):[/bold red]")
        for cycle in cycles:
            console.print(f"  [red]- {' -> '.join(cycle)}[/red]")
    else:
        console.print("[green]No dependency cycles.[/green]")


def print_teardown(name: str, order: list[str]) -> None:
    """Print the order in which ``unrequire(name)`` unloads names."""
    console.print(Panel(f"Unrequire [bold]{name}[/bold]", title="Teardown Order"))
    for index, entry in enumerate(order, start=1):
        style = "bold" if entry == name else ""
        console.print(f"  {index}. ", Text(entry, style=style))


def print_json(data: Any) -> None:  # noqa: ANN401
    """Print data as formatted JSON.

    Args:
        data: JSON-serializable data structure.
    """
    console.print_json(json.dumps(data, default=str))
