"""Execution outcome types."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from workspaces_filter.errors import CommandExecutionError


class ExecutionStatus(Enum):
    """Outcome of a command in one package."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of running a command in a single package.

    Attributes:
        package_name: Name of the package.
        status: Execution status.
        exit_code: Process exit code, -1 if the process never started.
        command: Command line that was run.
        directory: Working directory of the command.
        stdout: Captured standard output (only when output is streamed).
        stderr: Captured standard error (only when output is streamed).
        duration_ms: Wall time in milliseconds.
        error: Failure details, None on success.
    """

    package_name: str
    status: ExecutionStatus
    exit_code: int
    command: str = ""
    directory: Path | None = None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    error: CommandExecutionError | None = None

    @property
    def success(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status == ExecutionStatus.FAILURE

    @classmethod
    def success_result(
        cls,
        package_name: str,
        *,
        command: str = "",
        directory: Path | None = None,
        stdout: str = "",
        stderr: str = "",
        duration_ms: int = 0,
    ) -> ExecutionResult:
        """Create a successful result."""
        return cls(
            package_name=package_name,
            status=ExecutionStatus.SUCCESS,
            exit_code=0,
            command=command,
            directory=directory,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
        )

    @classmethod
    def failure_result(
        cls,
        error: CommandExecutionError,
        *,
        stdout: str = "",
        stderr: str = "",
        duration_ms: int = 0,
    ) -> ExecutionResult:
        """Create a failed result from the error that caused it."""
        return cls(
            package_name=error.package_name,
            status=ExecutionStatus.FAILURE,
            exit_code=error.exit_code,
            command=error.command,
            directory=error.directory,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
            error=error,
        )


@dataclass
class BatchResult:
    """Results of running a command across packages."""

    results: list[ExecutionResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[ExecutionResult]:
        return iter(self.results)

    @property
    def all_success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def any_failure(self) -> bool:
        return any(r.failed for r in self.results)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def failures(self) -> list[ExecutionResult]:
        return [r for r in self.results if r.failed]
