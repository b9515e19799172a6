"""Filter command implementation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from workspaces_filter.commands.base import Command, CommandContext
from workspaces_filter.errors import InvalidArgumentError
from workspaces_filter.filters import filter_graph, parse_patterns
from workspaces_filter.workspace import WorkspaceGraph, discover_packages, parse_globs


@dataclass
class FilterOptions:
    """Options for filter command."""

    workspace_globs: list[str]
    patterns: list[str] = field(default_factory=list)


class FilterCommand(Command[WorkspaceGraph]):
    """Discover workspace packages and select those matching the patterns.

    A package is selected when any pattern is a substring of its name or
    directory, or glob-matches either of them. "." and "*" select everything.
    """

    def __init__(self, context: CommandContext, options: FilterOptions) -> None:
        super().__init__(context)
        self.options = options

    def validate(self) -> list[str]:
        """Validate the command."""
        errors = super().validate()

        if not self.options.workspace_globs:
            errors.append("No workspace globs provided.")
        if not self.options.patterns:
            errors.append("No pattern provided.")

        return errors

    async def execute(self) -> WorkspaceGraph:
        """Execute the filter."""
        errors = self.validate()
        if errors:
            raise InvalidArgumentError(" ".join(errors))

        graph = await discover_packages(self.options.workspace_globs, self.cwd)
        return filter_graph(graph, self.options.patterns)


async def filter_workspaces(
    workspace_globs: str | Sequence[str],
    pattern: str | Sequence[str],
    cwd: Path | str | None = None,
) -> WorkspaceGraph:
    """Filter workspace packages by name or directory.

    Example:
        graph = await filter_workspaces(["packages/*"], "*preset*")
        graph = await filter_workspaces(["packages/*"], ["pkg-1", "pkg-2"])
        graph = await filter_workspaces(["packages/*"], "packages/foo")
        graph = await filter_workspaces(["packages/*"], "*", "/path/to/project")

    Args:
        workspace_globs: One directory glob of workspace packages or a
            sequence of them. Blank entries are ignored.
        pattern: One selection pattern or a sequence of them.
        cwd: Workspace root (defaults to the current directory).

    Returns:
        Graph of the selected packages keyed by name.

    Raises:
        InvalidArgumentError: If no non-blank glob or pattern is given.
        ManifestReadError: If a discovered package.json cannot be read.
        ManifestParseError: If a discovered package.json is invalid.
    """
    root = Path(cwd).absolute() if cwd else Path.cwd()

    context = CommandContext(cwd=root)
    options = FilterOptions(
        workspace_globs=parse_globs(workspace_globs),
        patterns=parse_patterns(pattern),
    )
    cmd = FilterCommand(context, options)
    return await cmd.execute()
