"""Pattern-based package selection."""

from __future__ import annotations

from collections.abc import Sequence

from wcmatch import glob

from workspaces_filter.workspace.package import PackageMetadata, WorkspaceGraph

# Patterns that select every package.
SELECT_ALL = frozenset({".", "*"})

MATCH_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.EXTGLOB | glob.CASE


def parse_patterns(pattern: str | Sequence[str] | None) -> list[str]:
    """Normalize selection patterns.

    A plain string is a single pattern. Patterns are stripped and blank
    entries dropped:
    - "foo" -> ["foo"]
    - ["foo", "", " bar "] -> ["foo", "bar"]

    Args:
        pattern: One pattern or a sequence of patterns.

    Returns:
        List of non-empty patterns.
    """
    if not pattern:
        return []

    patterns = [pattern] if isinstance(pattern, str) else list(pattern)
    stripped = [p.strip() for p in patterns if p]
    return [p for p in stripped if p]


def selects_all(patterns: Sequence[str]) -> bool:
    """Check if any pattern is the select-everything shortcut."""
    return any(p in SELECT_ALL for p in patterns)


def _dotted(value: str) -> str:
    return value.replace("/", ".")


def _directory_pattern(pattern: str) -> str:
    return pattern[2:] if pattern.startswith("./") else pattern


def match_package(name: str, package: PackageMetadata, patterns: Sequence[str]) -> bool:
    """Check if a package matches any of the selection patterns.

    A pattern matches when it is a substring of the package name or
    directory, when the name glob-matches it (with "/" read as "." on both
    sides, so "@scope/*" matches "@scope/foo"), or when the directory
    glob-matches it.

    Args:
        name: Graph key of the package.
        package: Package metadata.
        patterns: Selection patterns.

    Returns:
        True if package matches any pattern.
    """
    directory = package.directory

    for pattern in patterns:
        # Substring match
        if pattern in name or pattern in directory:
            return True

    if glob.globmatch(_dotted(name), [_dotted(p) for p in patterns], flags=MATCH_FLAGS):
        return True

    return glob.globmatch(
        directory,
        [_directory_pattern(p) for p in patterns],
        flags=MATCH_FLAGS,
    )


def filter_graph(graph: WorkspaceGraph, patterns: Sequence[str]) -> WorkspaceGraph:
    """Narrow a workspace graph to the packages selected by the patterns.

    Args:
        graph: Full workspace graph.
        patterns: Normalized selection patterns.

    Returns:
        New graph holding the matched entries, possibly empty.
    """
    if selects_all(patterns):
        return graph

    return {name: pkg for name, pkg in graph.items() if match_package(name, pkg, patterns)}
