"""Shared test fixtures for workspaces-filter tests."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")


def write_manifest(directory: Path, manifest: dict[str, Any]) -> Path:
    """Write a package.json into a directory, creating it."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps(manifest, indent=2))
    return path


@pytest.fixture
def make_package() -> Callable[[Path, dict[str, Any]], Path]:
    """Factory writing a package.json into a directory."""
    return write_manifest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_packages() -> list[dict[str, Any]]:
    """Manifests of the sample workspace packages."""
    return [
        {"name": "@scope/foo", "version": "1.0.0", "scripts": {"test": "echo foo-test"}},
        {"name": "@scope/bar", "version": "2.1.0", "scripts": {"build": "echo bar"}},
        {"name": "baz-utils", "version": "0.2.3", "scripts": {"dev": "echo bazutils"}},
        {"name": "baz-preset", "version": "0.1.0", "scripts": {"dev": "echo baz"}},
    ]


@pytest.fixture
def workspace_dir(temp_dir: Path, sample_packages: list[dict[str, Any]]) -> Path:
    """Create a sample bun workspace.

    packages/foo      @scope/foo@1.0.0
    packages/bar      @scope/bar@2.1.0
    packages/baz-utils   baz-utils@0.2.3
    packages/baz-preset  baz-preset@0.1.0
    """
    write_manifest(
        temp_dir,
        {"name": "root", "private": True, "workspaces": ["packages/*"]},
    )

    for manifest in sample_packages:
        dirname = manifest["name"].replace("@scope/", "")
        write_manifest(temp_dir / "packages" / dirname, manifest)

    return temp_dir
