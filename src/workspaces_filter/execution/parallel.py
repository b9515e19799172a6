"""Concurrent command fan-out across packages."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from pathlib import Path

from workspaces_filter.execution.results import BatchResult, ExecutionResult
from workspaces_filter.execution.runner import run_in_package
from workspaces_filter.workspace.package import PackageMetadata

CommandSpec = str | Callable[[PackageMetadata], str]
StartHandler = Callable[[PackageMetadata, str], None]
CompleteHandler = Callable[[ExecutionResult], Awaitable[None] | None]
OutputHandler = Callable[[str, str, bool], None]


class ParallelExecutor:
    """Execute commands across packages, all at once.

    Every package gets its own subprocess as soon as execution starts; there
    is no concurrency cap. A failure in one package never stops the others.

    Attributes:
        cwd: Base directory package directories are relative to.
        env: Extra environment variables for every command.
    """

    def __init__(self, cwd: Path, env: dict[str, str] | None = None) -> None:
        """Initialize executor.

        Args:
            cwd: Base directory.
            env: Extra environment variables.
        """
        self.cwd = cwd
        self.env = dict(env) if env else {}

    def _command_for(self, package: PackageMetadata, command: CommandSpec) -> str:
        return command(package) if callable(command) else command

    async def run_one(
        self,
        package: PackageMetadata,
        command: CommandSpec,
        *,
        output_handler: OutputHandler | None = None,
        on_start: StartHandler | None = None,
        on_complete: CompleteHandler | None = None,
    ) -> ExecutionResult:
        """Run the command in one package and notify the handlers.

        Args:
            package: Package to run in.
            command: Command line, or a function building it per package.
            output_handler: Callback (pkg_name, line, is_stderr) for streaming output.
            on_start: Called with the package and command before spawning.
            on_complete: Called with the result; may be a coroutine function.

        Returns:
            Execution result.
        """
        cmd = self._command_for(package, command)
        if on_start:
            on_start(package, cmd)

        on_out = None
        on_err = None
        if output_handler:
            handler = output_handler

            def _on_out(line: str) -> None:
                handler(package.name, line, False)

            def _on_err(line: str) -> None:
                handler(package.name, line, True)

            on_out = _on_out
            on_err = _on_err

        result = await run_in_package(
            package,
            cmd,
            self.cwd,
            env=self.env,
            on_stdout=on_out,
            on_stderr=on_err,
        )

        if on_complete:
            outcome = on_complete(result)
            if inspect.isawaitable(outcome):
                await outcome

        return result

    async def execute(
        self,
        packages: Sequence[PackageMetadata],
        command: CommandSpec,
        *,
        output_handler: OutputHandler | None = None,
        on_start: StartHandler | None = None,
        on_complete: CompleteHandler | None = None,
    ) -> BatchResult:
        """Execute command across packages concurrently.

        Args:
            packages: Packages to run command in.
            command: Command line, or a function building it per package.
            output_handler: Callback (pkg_name, line, is_stderr) for streaming output.
            on_start: Called with the package and command before spawning.
            on_complete: Called with each result as it completes.

        Returns:
            Batch result with one result per package, in input order.

        Raises:
            Exception: The first error raised by a handler, once all packages
                have finished.
        """
        tasks = [
            asyncio.create_task(
                self.run_one(
                    pkg,
                    command,
                    output_handler=output_handler,
                    on_start=on_start,
                    on_complete=on_complete,
                )
            )
            for pkg in packages
        ]
        # Let every package settle before a failing handler propagates
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        return BatchResult(results=[o for o in outcomes if isinstance(o, ExecutionResult)])

    async def stream(
        self,
        packages: Sequence[PackageMetadata],
        command: CommandSpec,
        *,
        output_handler: OutputHandler | None = None,
        on_start: StartHandler | None = None,
    ) -> AsyncIterator[ExecutionResult]:
        """Stream execution results as they complete.

        Args:
            packages: Packages to run command in.
            command: Command line, or a function building it per package.
            output_handler: Callback (pkg_name, line, is_stderr) for streaming output.
            on_start: Called with the package and command before spawning.

        Yields:
            Execution results in completion order.
        """
        pending = {
            asyncio.create_task(
                self.run_one(pkg, command, output_handler=output_handler, on_start=on_start)
            )
            for pkg in packages
        }

        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                for task in done:
                    yield task.result()
        finally:
            # Consumer stopped early
            for task in pending:
                task.cancel()
