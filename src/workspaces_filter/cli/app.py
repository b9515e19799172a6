"""workspaces-filter CLI application."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from workspaces_filter.commands import (
    PrintFormat,
    filter_workspaces,
    handle_list_command,
    handle_run_command,
)
from workspaces_filter.config import WorkspaceConfig, load_workspace_config
from workspaces_filter.errors import WorkspacesFilterError

# Patterns selecting every package. "_" exists because a bare * gets
# expanded by the shell.
ALL_PACKAGES = frozenset({".", "_", "*"})

EPILOG = """\
Examples:

  workspaces-filter . build   # run in all packages of all workspaces\n
  workspaces-filter _ build   # because the "*" would not work if raw\n
  workspaces-filter '*' build   # should be quoted to avoid shell globbing\n
  workspaces-filter "*preset*" build\n
  workspaces-filter "*preset*" add foo-pkg barry-pkg\n
  workspaces-filter "*preset*" add --dev typescript\n
  workspaces-filter "*preset*" test -- --watch   # script arguments after --\n
  workspaces-filter "./packages/foo" -- echo "Hello, World!"\n
  workspaces-filter "./packages/*preset*" -- pwd\n
  workspaces-filter "*preset*" --print names\n
  workspaces-filter "*preset*" --print json\n
  workspaces-filter "*preset*" --print dirs
"""


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from workspaces_filter import __version__

        print(f"workspaces-filter {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="workspaces-filter",
    help="Select workspace packages and run commands in them",
    add_completion=False,
)

console = Console()
error_console = Console(stderr=True)


# Hidden option carrying the number of arguments after a "--" separator.
SEPARATED_OPTION = "--separated-args"


def split_shell_args(argv: list[str]) -> list[str]:
    """Record how many arguments follow a ``--`` separator.

    Click drops the separator itself. With no command before it, the
    arguments after ``--`` form a shell command; otherwise they are appended
    to the script call (``test -- --watch`` runs ``<pm> run test --watch``).
    """
    if "--" not in argv:
        return argv
    index = argv.index("--")
    separated = len(argv) - index - 1
    return [*argv[:index], SEPARATED_OPTION, str(separated), *argv[index:]]


def get_workspace_config(cwd: Path, package_manager: str | None) -> WorkspaceConfig:
    """Load the workspace configuration of a root directory."""
    try:
        return load_workspace_config(cwd, package_manager)
    except WorkspacesFilterError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    epilog=EPILOG,
)
def main_cmd(
    ctx: typer.Context,
    pattern: Annotated[
        str,
        typer.Argument(help="Package name or workspace directory, as substring or glob"),
    ],
    command: Annotated[
        list[str] | None,
        typer.Argument(help="Script or package manager command, or shell command after --"),
    ] = None,
    print_mode: Annotated[
        PrintFormat | None,
        typer.Option(
            "--print",
            help="Print the names/folders of selected packages, without running command",
        ),
    ] = None,
    cwd: Annotated[
        Path | None,
        typer.Option("--cwd", help="Current working directory"),
    ] = None,
    package_manager: Annotated[
        str | None,
        typer.Option(
            "--package-manager",
            "--pm",
            envvar="WORKSPACES_FILTER_PM",
            help="The package manager to use. Defaults to packageManager from root "
            "package.json, or bun",
        ),
    ] = None,
    shell: Annotated[
        bool,
        typer.Option("--shell", help="Run the command through the shell in each package"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Report every package outcome"),
    ] = False,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    separated: Annotated[
        int,
        typer.Option(SEPARATED_OPTION, hidden=True),
    ] = 0,
) -> None:
    """Select by package name or workspace directory and run a command."""
    command_args = [*(command or []), *ctx.args]
    is_shell = shell or (separated > 0 and separated == len(command_args))

    if not command_args and print_mode is None:
        console.print(ctx.get_help(), markup=False, highlight=False)
        return

    root = (cwd or Path.cwd()).absolute()
    config = get_workspace_config(root, package_manager)

    if not config.workspaces:
        console.print(
            "No workspaces found! Make sure you have 'workspaces' field in your package.json "
            "or 'packages' field in your pnpm-workspace.yaml"
        )
        return

    selection = "*" if pattern in ALL_PACKAGES else pattern

    try:
        selected = asyncio.run(filter_workspaces(config.workspaces, selection, root))
    except WorkspacesFilterError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    if print_mode is not None:
        handle_list_command(selected, print_mode, console=console)
        return

    if not selected:
        console.print("No packages matching the filter.")
        return

    asyncio.run(
        handle_run_command(
            selected,
            command_args,
            cwd=root,
            console=console,
            error_console=error_console,
            is_shell=is_shell,
            package_manager=config.package_manager,
            verbose=verbose,
        )
    )


def main() -> None:
    """Main entry point."""
    app(args=split_shell_args(sys.argv[1:]), prog_name="workspaces-filter")


if __name__ == "__main__":
    main()
