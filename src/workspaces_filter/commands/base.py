"""Base command infrastructure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

TResult = TypeVar("TResult")


@dataclass
class CommandContext:
    """Context passed to all commands.

    Attributes:
        cwd: Base directory of the workspace. Package directories are
            relative to it.
        verbose: If True, show detailed output.
        env: Extra environment variables for spawned commands.
    """

    cwd: Path
    verbose: bool = False
    env: dict[str, str] = field(default_factory=dict)


class Command(ABC, Generic[TResult]):
    """Base class for all workspaces-filter commands.

    Commands encapsulate the logic for a specific operation.
    They receive a context and return a result.
    """

    def __init__(self, context: CommandContext) -> None:
        """Initialize command.

        Args:
            context: Command context.
        """
        self.context = context
        self.cwd = context.cwd

    @abstractmethod
    async def execute(self) -> TResult:
        """Execute the command.

        Returns:
            Command-specific result.
        """
        ...

    def validate(self) -> list[str]:
        """Validate that the command can be executed.

        Returns:
            List of validation errors (empty if valid).
        """
        return []
