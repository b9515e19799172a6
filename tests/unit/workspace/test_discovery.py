"""Tests for package discovery."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from workspaces_filter.errors import ManifestParseError, ManifestReadError
from workspaces_filter.workspace.discovery import (
    discover_packages,
    iter_manifest_paths,
    manifest_patterns,
    parse_globs,
    read_package,
)

MakePackage = Callable[[Path, dict[str, Any]], Path]


class TestParseGlobs:
    """Tests for parse_globs."""

    def test_single_string(self) -> None:
        assert parse_globs("packages/*") == ["packages/*"]

    def test_sequence(self) -> None:
        assert parse_globs(["packages/*", " apps/* "]) == ["packages/*", "apps/*"]

    @pytest.mark.parametrize("value", ["", "/", None, [], ["", "  ", "/"]])
    def test_empty(self, value: str | list[str] | None) -> None:
        assert parse_globs(value) == []


class TestManifestPatterns:
    """Tests for manifest_patterns."""

    def test_appends_manifest_name(self) -> None:
        assert manifest_patterns(["packages/*", "apps/*"]) == [
            "packages/*/package.json",
            "apps/*/package.json",
        ]

    def test_strips_trailing_slash(self) -> None:
        assert manifest_patterns(["packages/*/"]) == ["packages/*/package.json"]

    def test_skips_blank_globs(self) -> None:
        assert manifest_patterns(["", "/", "packages/*"]) == ["packages/*/package.json"]


class TestIterManifestPaths:
    """Tests for iter_manifest_paths."""

    async def test_yields_absolute_paths(self, workspace_dir: Path) -> None:
        paths = [p async for p in iter_manifest_paths(["packages/*"], workspace_dir)]

        assert len(paths) == 4
        assert all(p.is_absolute() for p in paths)
        assert all(p.name == "package.json" for p in paths)

    async def test_ignores_root_manifest(self, workspace_dir: Path) -> None:
        paths = [p async for p in iter_manifest_paths(["packages/*"], workspace_dir)]
        assert workspace_dir / "package.json" not in paths

    async def test_globstar(self, temp_dir: Path, make_package: MakePackage) -> None:
        make_package(temp_dir / "packages" / "a", {"name": "a"})
        make_package(temp_dir / "packages" / "nested" / "b", {"name": "b"})

        paths = [p async for p in iter_manifest_paths(["packages/**"], temp_dir)]
        parents = sorted(p.parent.name for p in paths)
        assert parents == ["a", "b"]

    async def test_brace_expansion(self, temp_dir: Path, make_package: MakePackage) -> None:
        make_package(temp_dir / "apps" / "web", {"name": "web"})
        make_package(temp_dir / "libs" / "ui", {"name": "ui"})
        make_package(temp_dir / "tools" / "cli", {"name": "cli"})

        paths = [p async for p in iter_manifest_paths(["{apps,libs}/*"], temp_dir)]
        parents = sorted(p.parent.name for p in paths)
        assert parents == ["ui", "web"]

    async def test_skips_directories_without_manifest(
        self, temp_dir: Path, make_package: MakePackage
    ) -> None:
        make_package(temp_dir / "packages" / "a", {"name": "a"})
        (temp_dir / "packages" / "empty").mkdir()

        paths = [p async for p in iter_manifest_paths(["packages/*"], temp_dir)]
        assert len(paths) == 1

    async def test_blank_glob_stays_in_base_directory(self, temp_dir: Path) -> None:
        paths = [p async for p in iter_manifest_paths(["/", ""], temp_dir)]
        assert paths == []

    async def test_plain_string_glob(self, workspace_dir: Path) -> None:
        paths = [p async for p in iter_manifest_paths("packages/*", workspace_dir)]
        assert len(paths) == 4

    async def test_no_matches(self, temp_dir: Path) -> None:
        paths = [p async for p in iter_manifest_paths(["missing/*"], temp_dir)]
        assert paths == []


class TestReadPackage:
    """Tests for read_package."""

    def test_reads_manifest(self, workspace_dir: Path) -> None:
        path = workspace_dir / "packages" / "foo" / "package.json"
        meta = read_package(path, workspace_dir)

        assert meta.name == "@scope/foo"
        assert meta.version == "1.0.0"
        assert meta.directory == "packages/foo"
        assert meta.scripts == {"test": "echo foo-test"}

    def test_defaults_missing_fields(self, temp_dir: Path, make_package: MakePackage) -> None:
        path = make_package(temp_dir / "packages" / "bare", {"name": "bare"})
        meta = read_package(path, temp_dir)

        assert meta.version == "0.0.0"
        assert meta.license == ""
        assert meta.dependencies == {}

    def test_invalid_json(self, temp_dir: Path) -> None:
        pkg_dir = temp_dir / "packages" / "broken"
        pkg_dir.mkdir(parents=True)
        path = pkg_dir / "package.json"
        path.write_text("{not json")

        with pytest.raises(ManifestParseError) as exc_info:
            read_package(path, temp_dir)
        assert exc_info.value.path == path

    def test_invalid_structure(self, temp_dir: Path, make_package: MakePackage) -> None:
        path = make_package(temp_dir / "packages" / "bad", {"name": "bad", "version": 1})

        with pytest.raises(ManifestParseError):
            read_package(path, temp_dir)

    def test_unreadable(self, temp_dir: Path) -> None:
        path = temp_dir / "packages" / "gone" / "package.json"

        with pytest.raises(ManifestReadError):
            read_package(path, temp_dir)


class TestDiscoverPackages:
    """Tests for discover_packages."""

    async def test_builds_graph(self, workspace_dir: Path) -> None:
        graph = await discover_packages(["packages/*"], workspace_dir)

        assert set(graph) == {"@scope/foo", "@scope/bar", "baz-utils", "baz-preset"}
        assert graph["@scope/bar"].version == "2.1.0"
        assert graph["baz-preset"].directory == "packages/baz-preset"

    async def test_multiple_globs(self, workspace_dir: Path, make_package: MakePackage) -> None:
        make_package(workspace_dir / "apps" / "web", {"name": "web"})

        graph = await discover_packages(["packages/*", "apps/*"], workspace_dir)

        assert len(graph) == 5
        assert graph["web"].directory == "apps/web"

    async def test_duplicate_names_keep_one(
        self, temp_dir: Path, make_package: MakePackage
    ) -> None:
        make_package(temp_dir / "packages" / "a", {"name": "dup", "version": "1.0.0"})
        make_package(temp_dir / "packages" / "b", {"name": "dup", "version": "2.0.0"})

        graph = await discover_packages(["packages/*"], temp_dir)

        assert list(graph) == ["dup"]
        assert graph["dup"].version in {"1.0.0", "2.0.0"}

    async def test_nameless_packages_do_not_collide(
        self, temp_dir: Path, make_package: MakePackage
    ) -> None:
        make_package(temp_dir / "packages" / "a", {"version": "1.0.0"})
        make_package(temp_dir / "packages" / "b", {"version": "2.0.0"})

        graph = await discover_packages(["packages/*"], temp_dir)

        assert set(graph) == {"packages/a", "packages/b"}

    async def test_parse_error_aborts(self, workspace_dir: Path) -> None:
        broken = workspace_dir / "packages" / "broken"
        broken.mkdir()
        (broken / "package.json").write_text("[1, 2")

        with pytest.raises(ManifestParseError):
            await discover_packages(["packages/*"], workspace_dir)

    async def test_empty_workspace(self, temp_dir: Path) -> None:
        (temp_dir / "packages").mkdir()
        graph = await discover_packages(["packages/*"], temp_dir)
        assert graph == {}

    async def test_repeatable(self, workspace_dir: Path) -> None:
        first = await discover_packages(["packages/*"], workspace_dir)
        second = await discover_packages(["packages/*"], workspace_dir)

        assert set(first) == set(second)
        assert all(first[name] == second[name] for name in first)
