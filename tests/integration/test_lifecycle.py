"""Full lifecycle integration tests."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

import workspaces_filter


def run_cli(args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    """Run workspaces-filter CLI command."""
    return subprocess.run(
        [sys.executable, "-m", "workspaces_filter", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
    )


def create_package(path: Path, name: str, version: str = "0.1.0", **scripts: str) -> None:
    """Create a simple package."""
    path.mkdir(parents=True, exist_ok=True)
    manifest = {"name": name, "version": version, "scripts": scripts}
    (path / "package.json").write_text(json.dumps(manifest))


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """Workspace with packages and apps."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "root", "workspaces": ["packages/*", "apps/*"]})
    )
    create_package(tmp_path / "packages" / "core", "@acme/core", "1.2.0", build="echo core")
    create_package(tmp_path / "packages" / "ui-preset", "@acme/ui-preset", "0.3.0")
    create_package(tmp_path / "apps" / "web", "web", "2.0.0", dev="echo web")
    return tmp_path


class TestVersion:
    """Tests for --version."""

    def test_version(self, tmp_path: Path) -> None:
        result = run_cli(["--version"], tmp_path)

        assert result.returncode == 0
        assert result.stdout.strip() == f"workspaces-filter {workspaces_filter.__version__}"


class TestPrint:
    """Tests for printing selections."""

    def test_names(self, monorepo: Path) -> None:
        result = run_cli(["_", "--print", "names"], monorepo)

        assert result.returncode == 0
        assert sorted(result.stdout.split()) == ["@acme/core", "@acme/ui-preset", "web"]

    def test_dirs_from_other_directory(self, monorepo: Path, tmp_path_factory) -> None:
        elsewhere = tmp_path_factory.mktemp("elsewhere")

        result = run_cli(["apps/*", "--cwd", str(monorepo), "--print", "dirs"], elsewhere)

        assert result.returncode == 0
        assert result.stdout.split() == ["apps/web"]

    def test_json(self, monorepo: Path) -> None:
        result = run_cli(["*preset*", "--print", "json"], monorepo)

        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert data["@acme/ui-preset"]["version"] == "0.3.0"
        assert data["@acme/ui-preset"]["dir"] == "packages/ui-preset"


class TestRun:
    """Tests for running commands."""

    def test_shell_command_runs_in_package(self, monorepo: Path) -> None:
        result = run_cli(["web", "--", "pwd"], monorepo)

        assert result.returncode == 0
        assert result.stdout.strip().endswith("apps/web")

    def test_shell_command_with_flags(self, monorepo: Path) -> None:
        result = run_cli(["core", "--", "echo", "--verbose", "-x"], monorepo)

        assert result.returncode == 0
        assert "--verbose -x" in result.stdout

    def test_script_through_package_manager(self, monorepo: Path) -> None:
        result = run_cli(["core", "--pm", "echo", "build", "--watch"], monorepo)

        assert result.returncode == 0
        assert 'Running in "packages/core" (@acme/core)' in result.stdout
        assert "run build --watch" in result.stdout

    def test_script_arguments_after_separator(self, monorepo: Path) -> None:
        result = run_cli(["core", "--pm", "echo", "build", "--", "--watch"], monorepo)

        assert result.returncode == 0
        assert "run build --watch" in result.stdout

    def test_declared_package_manager(self, monorepo: Path) -> None:
        root = json.loads((monorepo / "package.json").read_text())
        root["packageManager"] = "echo@1.0.0"
        (monorepo / "package.json").write_text(json.dumps(root))

        result = run_cli(["web", "add", "lodash"], monorepo)

        assert result.returncode == 0
        assert "add lodash" in result.stdout

    def test_failure_exit_code(self, monorepo: Path) -> None:
        result = run_cli(["_", "--", "exit", "4"], monorepo)

        assert result.returncode == 1
        assert "exited with code 4" in result.stderr
        assert "3 failed, 0 passed" in result.stderr

    def test_no_match(self, monorepo: Path) -> None:
        result = run_cli(["nothing-here", "build"], monorepo)

        assert result.returncode == 0
        assert "No packages matching the filter." in result.stdout


class TestPnpm:
    """Tests for pnpm workspaces."""

    def test_pnpm_workspace_file(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "root", "packageManager": "pnpm@9.0.0"})
        )
        (tmp_path / "pnpm-workspace.yaml").write_text("packages:\n  - libs/*\n")
        create_package(tmp_path / "libs" / "a", "lib-a")

        result = run_cli(["lib-*", "--print", "names"], tmp_path)

        assert result.returncode == 0
        assert result.stdout.split() == ["lib-a"]
