"""Exception hierarchy for workspaces-filter."""

from __future__ import annotations

from pathlib import Path


class WorkspacesFilterError(Exception):
    """Base class for all workspaces-filter errors.

    Attributes:
        message: Human readable description of the failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(WorkspacesFilterError):
    """Raised when a core operation receives unusable input."""


class ConfigurationError(WorkspacesFilterError):
    """Raised when the root workspace configuration is invalid."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)
        self.path = path


class WorkspaceNotFoundError(WorkspacesFilterError):
    """Raised when no root package.json exists in the working directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"No package.json found in {path}")
        self.path = path


class ManifestReadError(WorkspacesFilterError):
    """Raised when a discovered package.json cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class ManifestParseError(WorkspacesFilterError):
    """Raised when a discovered package.json is not a valid manifest."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid manifest {path}: {reason}")
        self.path = path
        self.reason = reason


class CommandExecutionError(WorkspacesFilterError):
    """A command failed inside a single package.

    Attributes:
        package_name: Package the command ran in.
        command: Command line that was executed.
        exit_code: Process exit status, -1 if the process never started.
        directory: Working directory of the command.
    """

    def __init__(
        self,
        package_name: str,
        command: str,
        exit_code: int,
        directory: Path | None = None,
        reason: str | None = None,
    ) -> None:
        if reason:
            message = f"[{package_name}] `{command}` could not be started: {reason}"
        else:
            message = f"[{package_name}] `{command}` exited with code {exit_code}"
        super().__init__(message)
        self.package_name = package_name
        self.command = command
        self.exit_code = exit_code
        self.directory = directory
        self.reason = reason
