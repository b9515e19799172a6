"""workspaces-filter commands."""

from workspaces_filter.commands.base import Command, CommandContext
from workspaces_filter.commands.filter import FilterCommand, FilterOptions, filter_workspaces
from workspaces_filter.commands.list import PrintFormat, handle_list_command, render_graph
from workspaces_filter.commands.run import (
    ConsoleReporter,
    Reporter,
    RunCommand,
    RunOptions,
    handle_run_command,
    run_command_on,
)

__all__ = [
    # Base
    "Command",
    "CommandContext",
    # Filter
    "FilterCommand",
    "FilterOptions",
    "filter_workspaces",
    # Run
    "RunCommand",
    "RunOptions",
    "Reporter",
    "ConsoleReporter",
    "run_command_on",
    "handle_run_command",
    # List
    "PrintFormat",
    "render_graph",
    "handle_list_command",
]
