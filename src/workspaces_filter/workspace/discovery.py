"""Package discovery from workspace globs."""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

from pydantic import ValidationError
from wcmatch import glob

from workspaces_filter.errors import ManifestParseError, ManifestReadError
from workspaces_filter.workspace.package import PackageManifest, PackageMetadata, WorkspaceGraph

MANIFEST_NAME = "package.json"

# Globstar, brace and extglob syntax; hidden directories are skipped.
DISCOVERY_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.EXTGLOB | glob.FOLLOW

_DONE = object()


def parse_globs(workspace_globs: str | Sequence[str] | None) -> list[str]:
    """Normalize workspace directory globs.

    A plain string is a single glob. Entries are stripped, trailing slashes
    removed, and entries left empty (such as "" or "/") dropped so they never
    resolve to the filesystem root.
    """
    if not workspace_globs:
        return []

    globs = [workspace_globs] if isinstance(workspace_globs, str) else list(workspace_globs)
    stripped = [g.strip().rstrip("/") for g in globs if g]
    return [g for g in stripped if g]


def manifest_patterns(workspace_globs: str | Sequence[str]) -> list[str]:
    """Turn workspace directory globs into package.json globs.

    Args:
        workspace_globs: Directory globs such as ``packages/*``.

    Returns:
        One ``<glob>/package.json`` pattern per non-empty glob.
    """
    return [f"{g}/{MANIFEST_NAME}" for g in parse_globs(workspace_globs)]


async def iter_manifest_paths(
    workspace_globs: str | Sequence[str],
    cwd: Path,
) -> AsyncIterator[Path]:
    """Lazily yield absolute paths of package.json files under the globs.

    Matches are pulled one at a time from wcmatch's lazy iterator in a
    worker thread, so large workspaces stream instead of being enumerated
    up front.

    Args:
        workspace_globs: Directory globs relative to ``cwd``.
        cwd: Base directory.

    Yields:
        Absolute manifest paths, in the order the glob produces them.
    """
    patterns = manifest_patterns(workspace_globs)
    if not patterns:
        return

    matches = glob.iglob(
        patterns,
        flags=DISCOVERY_FLAGS,
        root_dir=str(cwd),
    )

    while True:
        match = await asyncio.to_thread(next, matches, _DONE)
        if match is _DONE:
            break
        yield (cwd / match).absolute()


def read_package(manifest_path: Path, cwd: Path) -> PackageMetadata:
    """Read and validate a single package.json.

    Args:
        manifest_path: Absolute path to the manifest.
        cwd: Base directory the package directory is made relative to.

    Returns:
        Package metadata.

    Raises:
        ManifestReadError: If the file cannot be read.
        ManifestParseError: If the file is not valid JSON or not a manifest.
    """
    try:
        content = manifest_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestReadError(manifest_path, e.strerror or str(e)) from e

    try:
        manifest = PackageManifest.model_validate(json.loads(content))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ManifestParseError(manifest_path, str(e)) from e

    directory = Path(os.path.relpath(manifest_path.parent, cwd)).as_posix()
    return PackageMetadata.from_manifest(manifest, directory)


async def discover_packages(
    workspace_globs: str | Sequence[str],
    cwd: Path,
) -> WorkspaceGraph:
    """Build the workspace graph for all packages under the globs.

    Every manifest is read in its own task as soon as its path is yielded.
    The graph is assembled once all reads completed, in discovery order, so a
    later package with a duplicate name replaces the earlier one.

    Args:
        workspace_globs: Directory globs relative to ``cwd``.
        cwd: Base directory.

    Returns:
        Mapping of package name to metadata.

    Raises:
        ManifestReadError: On the first unreadable manifest.
        ManifestParseError: On the first invalid manifest.
    """
    tasks: list[asyncio.Task[PackageMetadata]] = []

    try:
        async for manifest_path in iter_manifest_paths(workspace_globs, cwd):
            tasks.append(asyncio.create_task(asyncio.to_thread(read_package, manifest_path, cwd)))
        packages = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise

    graph: WorkspaceGraph = {}
    for package in packages:
        graph[package.name] = package
    return graph
