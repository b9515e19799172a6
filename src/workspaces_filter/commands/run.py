"""Run command implementation."""

from __future__ import annotations

import inspect
import shlex
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.traceback import Traceback

from workspaces_filter.commands.base import Command, CommandContext
from workspaces_filter.config import DEFAULT_PACKAGE_MANAGER
from workspaces_filter.errors import CommandExecutionError
from workspaces_filter.execution import BatchResult, ExecutionResult, ParallelExecutor
from workspaces_filter.execution.parallel import OutputHandler
from workspaces_filter.workspace import PackageMetadata, WorkspaceGraph

Observer = Callable[[CommandExecutionError | None, bool], Awaitable[None] | None]


class Reporter:
    """Receives execution events. The base class ignores them."""

    def started(self, package: PackageMetadata, command: str) -> None:
        """A command is about to run in a package."""

    def finished(self, result: ExecutionResult) -> None:
        """A command completed in a package."""


class ConsoleReporter(Reporter):
    """Reports execution events on rich consoles.

    Script runs announce the package they run in; failures are written to
    the error console with exit code, command and directory. A traceback of
    the underlying OS error is added when the process could not be started.
    Verbose reporters also confirm every successful package.
    """

    def __init__(
        self,
        console: Console | None = None,
        error_console: Console | None = None,
        *,
        verbose: bool = False,
    ) -> None:
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.verbose = verbose

    def started(self, package: PackageMetadata, command: str) -> None:
        self.console.print(
            f'Running in "{escape(package.directory)}" ({escape(package.name)})',
            highlight=False,
        )

    def finished(self, result: ExecutionResult) -> None:
        error = result.error
        if error is None:
            if self.verbose:
                self.console.print(
                    f"[green]✓[/green] {escape(result.package_name)} ({result.duration_ms}ms)"
                )
            return

        self.error_console.print(f"[red]✗[/red] {escape(error.message)}")
        self.error_console.print(f"  [dim]in {escape(str(error.directory))}[/dim]")
        if error.__cause__ is not None:
            cause = error.__cause__
            self.error_console.print(
                Traceback.from_exception(type(cause), cause, cause.__traceback__)
            )


@dataclass
class RunOptions:
    """Options for run command."""

    command_args: list[str]
    is_shell: bool = False
    package_manager: str = DEFAULT_PACKAGE_MANAGER
    env: dict[str, str] = field(default_factory=dict)


class RunCommand(Command[BatchResult]):
    """Run a shell command or a package script in every package of a graph.

    In shell mode the arguments are joined into one command line. Otherwise
    the first argument is a script name: packages that declare it run
    ``<pm> run <script> ...``, the others ``<pm> <script> ...`` so package
    manager subcommands such as ``add`` work too.
    """

    def __init__(
        self,
        context: CommandContext,
        options: RunOptions,
        graph: WorkspaceGraph,
        *,
        reporter: Reporter | None = None,
        observer: Observer | None = None,
        output_handler: OutputHandler | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options
        self.graph = graph
        self.reporter = reporter or Reporter()
        self.observer = observer
        self.output_handler = output_handler

    def build_command(self, package: PackageMetadata) -> str:
        """Command line to run in a package."""
        args = self.options.command_args
        if self.options.is_shell:
            return " ".join(args)

        script, *rest = args or [""]
        cmd = [self.options.package_manager]
        if package.has_script(script):
            cmd.append("run")
        cmd.extend(a for a in [script, *rest] if a)
        return shlex.join(cmd)

    def _on_start(self, package: PackageMetadata, command: str) -> None:
        if not self.options.is_shell:
            self.reporter.started(package, command)

    async def _on_complete(self, result: ExecutionResult) -> None:
        self.reporter.finished(result)
        if self.observer is None:
            return

        outcome = self.observer(result.error, result.success)
        if inspect.isawaitable(outcome):
            await outcome

    async def execute(self) -> BatchResult:
        """Run the command everywhere and collect every outcome."""
        env = dict(self.context.env)
        env.update(self.options.env)

        executor = ParallelExecutor(self.cwd, env=env)
        return await executor.execute(
            list(self.graph.values()),
            self.build_command,
            output_handler=self.output_handler,
            on_start=self._on_start,
            on_complete=self._on_complete,
        )


async def run_command_on(
    command_args: Sequence[str],
    graph: WorkspaceGraph,
    *,
    cwd: Path | str | None = None,
    is_shell: bool = False,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    observer: Observer | None = None,
    reporter: Reporter | None = None,
    env: dict[str, str] | None = None,
    output_handler: OutputHandler | None = None,
) -> WorkspaceGraph:
    """Run a shell command or package script in each package of the graph.

    Example:
        graph = await filter_workspaces(["packages/*"], ["@scope/*"])
        await run_command_on(["echo", "Hello, World!"], graph, is_shell=True)
        await run_command_on(["build"], graph)

    Args:
        command_args: Shell command tokens, or a script name and its arguments.
        graph: Packages to run in.
        cwd: Workspace root (defaults to the current directory).
        is_shell: Run ``command_args`` as a shell command line.
        package_manager: Package manager used in script mode.
        observer: Called with ``(error, success)`` once per package; may be a
            coroutine function.
        reporter: Event sink; defaults to a ConsoleReporter.
        env: Extra environment variables.
        output_handler: Callback (pkg_name, line, is_stderr); when set, output
            is piped through it instead of going straight to the terminal.

    Returns:
        The graph it was given, unchanged.
    """
    root = Path(cwd).absolute() if cwd else Path.cwd()

    context = CommandContext(cwd=root)
    options = RunOptions(
        command_args=list(command_args),
        is_shell=is_shell,
        package_manager=package_manager,
        env=dict(env or {}),
    )
    cmd = RunCommand(
        context,
        options,
        graph,
        reporter=reporter if reporter is not None else ConsoleReporter(),
        observer=observer,
        output_handler=output_handler,
    )
    await cmd.execute()
    return graph


async def handle_run_command(
    graph: WorkspaceGraph,
    command_args: list[str],
    *,
    cwd: Path,
    console: Console,
    error_console: Console,
    is_shell: bool = False,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    verbose: bool = False,
) -> None:
    context = CommandContext(cwd=cwd, verbose=verbose)
    options = RunOptions(
        command_args=command_args,
        is_shell=is_shell,
        package_manager=package_manager,
    )
    reporter = ConsoleReporter(console, error_console, verbose=verbose)
    result = await RunCommand(context, options, graph, reporter=reporter).execute()

    if result.any_failure:
        error_console.print(
            f"\n[red]{result.failure_count} failed, {result.success_count} passed[/red]"
        )
        raise typer.Exit(1)

    if verbose:
        console.print(f"\n[green]All {len(result)} packages passed[/green]")
