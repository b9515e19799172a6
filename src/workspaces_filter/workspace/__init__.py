"""Workspace discovery and package metadata."""

from workspaces_filter.workspace.discovery import (
    discover_packages,
    iter_manifest_paths,
    manifest_patterns,
    parse_globs,
    read_package,
)
from workspaces_filter.workspace.package import PackageManifest, PackageMetadata, WorkspaceGraph

__all__ = [
    "PackageManifest",
    "PackageMetadata",
    "WorkspaceGraph",
    "discover_packages",
    "iter_manifest_paths",
    "manifest_patterns",
    "parse_globs",
    "read_package",
]
