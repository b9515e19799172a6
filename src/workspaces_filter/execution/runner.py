"""Subprocess execution inside package directories."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Callable
from pathlib import Path

from workspaces_filter.errors import CommandExecutionError
from workspaces_filter.execution.results import ExecutionResult
from workspaces_filter.workspace.package import PackageMetadata


async def _read_stream(
    stream: asyncio.StreamReader,
    callback: Callable[[str], None] | None,
    buffer: list[str],
) -> None:
    """Read from stream line by line."""
    while True:
        line = await stream.readline()
        if not line:
            break
        decoded = line.decode("utf-8", errors="replace")
        buffer.append(decoded)
        if callback:
            callback(decoded.rstrip())


async def run_command(
    command: str,
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    on_stdout: Callable[[str], None] | None = None,
    on_stderr: Callable[[str], None] | None = None,
) -> tuple[int, str, str]:
    """Run a shell command asynchronously.

    Without callbacks the process writes straight to this process's stdout
    and stderr and nothing is captured. With callbacks both streams are
    piped, forwarded line by line and captured.

    Args:
        command: Shell command to execute.
        cwd: Working directory.
        env: Environment variables (merged with current env).
        on_stdout: Callback for stdout lines.
        on_stderr: Callback for stderr lines.

    Returns:
        Tuple of (exit_code, stdout, stderr).

    Raises:
        OSError: If the process cannot be started.
    """
    run_env = os.environ.copy()
    if env:
        run_env.update(env)

    capture = on_stdout is not None or on_stderr is not None
    pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_shell(
        command,
        cwd=str(cwd),
        stdout=pipe,
        stderr=pipe,
        env=run_env,
    )

    if not capture:
        await process.wait()
        return process.returncode or 0, "", ""

    if process.stdout is None or process.stderr is None:
        raise RuntimeError("Process stdout/stderr is None")

    stdout_buffer: list[str] = []
    stderr_buffer: list[str] = []

    await asyncio.gather(
        _read_stream(process.stdout, on_stdout, stdout_buffer),
        _read_stream(process.stderr, on_stderr, stderr_buffer),
        process.wait(),
    )

    return process.returncode or 0, "".join(stdout_buffer), "".join(stderr_buffer)


def package_env(package: PackageMetadata, directory: Path) -> dict[str, str]:
    """Environment variables describing the package a command runs in."""
    return {
        "WORKSPACES_FILTER_PACKAGE_NAME": package.name,
        "WORKSPACES_FILTER_PACKAGE_DIR": str(directory),
        "WORKSPACES_FILTER_PACKAGE_VERSION": package.version,
    }


async def run_in_package(
    package: PackageMetadata,
    command: str,
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    on_stdout: Callable[[str], None] | None = None,
    on_stderr: Callable[[str], None] | None = None,
) -> ExecutionResult:
    """Run a command in a package directory.

    Failures are returned, never raised: a non-zero exit or a process that
    cannot be started yields a failed result carrying a
    CommandExecutionError.

    Args:
        package: Package to run command in.
        command: Shell command to execute.
        cwd: Base directory the package directory is relative to.
        env: Additional environment variables.
        on_stdout: Callback for stdout lines.
        on_stderr: Callback for stderr lines.

    Returns:
        Execution result.
    """
    directory = cwd / package.directory

    run_env = dict(env) if env else {}
    run_env.update(package_env(package, directory))

    start_time = time.monotonic()

    try:
        exit_code, stdout, stderr = await run_command(
            command,
            cwd=directory,
            env=run_env,
            on_stdout=on_stdout,
            on_stderr=on_stderr,
        )
    except (OSError, ValueError) as e:
        duration_ms = int((time.monotonic() - start_time) * 1000)
        error = CommandExecutionError(package.name, command, -1, directory, reason=str(e))
        error.__cause__ = e
        return ExecutionResult.failure_result(error, stderr=str(e), duration_ms=duration_ms)

    duration_ms = int((time.monotonic() - start_time) * 1000)

    if exit_code == 0:
        return ExecutionResult.success_result(
            package.name,
            command=command,
            directory=directory,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
        )

    error = CommandExecutionError(package.name, command, exit_code, directory)
    return ExecutionResult.failure_result(
        error,
        stdout=stdout,
        stderr=stderr,
        duration_ms=duration_ms,
    )
