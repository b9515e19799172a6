"""Command execution across packages."""

from workspaces_filter.execution.parallel import ParallelExecutor
from workspaces_filter.execution.results import BatchResult, ExecutionResult, ExecutionStatus
from workspaces_filter.execution.runner import run_command, run_in_package

__all__ = [
    "BatchResult",
    "ExecutionResult",
    "ExecutionStatus",
    "ParallelExecutor",
    "run_command",
    "run_in_package",
]
