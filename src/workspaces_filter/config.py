"""Root workspace configuration.

Resolves the workspace globs and the package manager from the root
``package.json`` and, for pnpm, ``pnpm-workspace.yaml``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from workspaces_filter.errors import ConfigurationError, WorkspaceNotFoundError

DEFAULT_PACKAGE_MANAGER = "bun"
ROOT_MANIFEST = "package.json"
PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"


class WorkspacePackages(BaseModel):
    """Object form of a workspaces field: ``{"packages": [...]}``."""

    model_config = ConfigDict(extra="ignore")

    packages: list[str] = []


class RootManifest(BaseModel):
    """Workspace-related fields of the root package.json."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    workspaces: list[str] | WorkspacePackages | None = None
    # Bun also accepts a singular "workspace" object
    workspace: WorkspacePackages | None = None
    package_manager: str | None = Field(default=None, alias="packageManager")

    def workspace_globs(self) -> list[str]:
        """Workspace globs in order of precedence."""
        if isinstance(self.workspaces, list):
            return self.workspaces
        if isinstance(self.workspaces, WorkspacePackages) and self.workspaces.packages:
            return self.workspaces.packages
        if self.workspace is not None:
            return self.workspace.packages
        return []

    def declared_package_manager(self) -> str | None:
        """Package manager name from ``packageManager`` ("pnpm@9.1.0" -> "pnpm")."""
        if not self.package_manager:
            return None
        return self.package_manager.split("@")[0] or None


class PnpmWorkspace(BaseModel):
    """Schema of pnpm-workspace.yaml."""

    model_config = ConfigDict(extra="ignore")

    packages: list[str] = []


@dataclass(frozen=True)
class WorkspaceConfig:
    """Resolved workspace configuration.

    Attributes:
        root: Workspace root directory.
        workspaces: Directory globs of workspace packages, possibly empty.
        package_manager: Package manager executable name.
    """

    root: Path
    workspaces: list[str]
    package_manager: str


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path.name}: {e.strerror or e}", path=path) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path.name}: {e}", path=path) from e


def load_root_manifest(root: Path) -> RootManifest:
    """Load the root package.json.

    Args:
        root: Workspace root directory.

    Returns:
        Validated root manifest.

    Raises:
        WorkspaceNotFoundError: If there is no package.json.
        ConfigurationError: If it cannot be read or validated.
    """
    path = root / ROOT_MANIFEST
    if not path.is_file():
        raise WorkspaceNotFoundError(root)

    try:
        return RootManifest.model_validate(_load_json(path))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid workspace fields: {e}", path=path) from e


def load_pnpm_workspace(root: Path) -> PnpmWorkspace:
    """Load pnpm-workspace.yaml.

    Raises:
        ConfigurationError: If the file is missing or invalid.
    """
    path = root / PNPM_WORKSPACE_FILE
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read {PNPM_WORKSPACE_FILE}", path=path) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", path=path) from e

    try:
        return PnpmWorkspace.model_validate(data or {})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {PNPM_WORKSPACE_FILE}: {e}", path=path) from e


def load_workspace_config(root: Path, package_manager: str | None = None) -> WorkspaceConfig:
    """Resolve workspace globs and the package manager for a root directory.

    The package manager is the explicit argument, else the root manifest's
    ``packageManager`` field, else bun. For pnpm the globs come from
    pnpm-workspace.yaml.

    Args:
        root: Workspace root directory.
        package_manager: Explicit package manager override.

    Returns:
        Resolved configuration.
    """
    manifest = load_root_manifest(root)
    pm = package_manager or manifest.declared_package_manager() or DEFAULT_PACKAGE_MANAGER

    workspaces = manifest.workspace_globs()
    if pm == "pnpm":
        workspaces = load_pnpm_workspace(root).packages

    return WorkspaceConfig(root=root, workspaces=list(workspaces), package_manager=pm)
