"""List command implementation."""

from __future__ import annotations

import json
from enum import Enum

from rich.console import Console

from workspaces_filter.workspace import WorkspaceGraph


class PrintFormat(str, Enum):
    """Output format for printing a selection."""

    NAMES = "names"
    JSON = "json"
    DIRS = "dirs"


def render_graph(graph: WorkspaceGraph, fmt: PrintFormat) -> str:
    """Render a graph for printing.

    Args:
        graph: Selected packages.
        fmt: Output format.

    Returns:
        Newline separated names or directories, or a JSON object keyed by
        package name.
    """
    if fmt == PrintFormat.JSON:
        return json.dumps({name: pkg.to_dict() for name, pkg in graph.items()})
    if fmt == PrintFormat.DIRS:
        return "\n".join(pkg.directory for pkg in graph.values())
    return "\n".join(graph.keys())


def handle_list_command(graph: WorkspaceGraph, fmt: PrintFormat, *, console: Console) -> None:
    output = render_graph(graph, fmt)
    if output:
        console.print(output, markup=False, highlight=False, soft_wrap=True)
