"""Package manifest schema and metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_VERSION = "0.0.0"


class PackageManifest(BaseModel):
    """The subset of package.json fields the workspace graph cares about.

    Unknown keys are ignored; missing optional fields fall back to their
    documented defaults.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    version: str = DEFAULT_VERSION
    license: str = ""
    exports: dict[str, Any] = {}
    scripts: dict[str, str] = {}
    dependencies: dict[str, str] = {}

    @field_validator("license", mode="before")
    @classmethod
    def _legacy_license(cls, value: Any) -> Any:
        # {"type": "MIT", "url": "..."}
        if isinstance(value, dict):
            return value.get("type", "")
        return value

    @field_validator("exports", mode="before")
    @classmethod
    def _exports_shorthand(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {".": value}
        return value


@dataclass(frozen=True)
class PackageMetadata:
    """A package discovered in the workspace.

    Attributes:
        directory: Package root relative to the base directory (POSIX style).
        name: Package name, used as the graph key.
        version: Package version.
        license: License identifier.
        exports: The manifest ``exports`` map.
        scripts: Scripts declared by the package.
        dependencies: Runtime dependencies of the package.
    """

    directory: str
    name: str
    version: str = DEFAULT_VERSION
    license: str = ""
    exports: dict[str, Any] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    dependencies: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: PackageManifest, directory: str) -> PackageMetadata:
        """Build metadata from a validated manifest.

        Packages without a name are keyed by their directory.
        """
        return cls(
            directory=directory,
            name=manifest.name or directory,
            version=manifest.version,
            license=manifest.license,
            exports=dict(manifest.exports),
            scripts=dict(manifest.scripts),
            dependencies=dict(manifest.dependencies),
        )

    def has_script(self, script: str) -> bool:
        """Check if the package declares a non-empty script."""
        return bool(script) and bool(self.scripts.get(script))

    def to_dict(self) -> dict[str, Any]:
        return {
            "dir": self.directory,
            "name": self.name,
            "version": self.version,
            "license": self.license,
            "exports": self.exports,
            "scripts": self.scripts,
            "dependencies": self.dependencies,
        }


# Package name -> metadata
WorkspaceGraph = dict[str, PackageMetadata]
