"""workspaces-filter - run commands in selected workspace packages.

Select packages of a JavaScript workspace by name or directory and run a
shell command or package script in each of them:
- Workspace discovery from directory globs
- Substring and glob selection of packages
- Concurrent per-package execution with isolated failures
"""

from workspaces_filter.commands import (
    ConsoleReporter,
    Reporter,
    filter_workspaces,
    run_command_on,
)
from workspaces_filter.config import WorkspaceConfig, load_workspace_config
from workspaces_filter.errors import (
    CommandExecutionError,
    ConfigurationError,
    InvalidArgumentError,
    ManifestParseError,
    ManifestReadError,
    WorkspaceNotFoundError,
    WorkspacesFilterError,
)
from workspaces_filter.execution import (
    BatchResult,
    ExecutionResult,
    ExecutionStatus,
    ParallelExecutor,
)
from workspaces_filter.workspace import PackageMetadata, WorkspaceGraph

__version__ = "0.8.1"

__all__ = [
    # Version
    "__version__",
    # Core
    "filter_workspaces",
    "run_command_on",
    "PackageMetadata",
    "WorkspaceGraph",
    "WorkspaceConfig",
    "load_workspace_config",
    # Execution
    "ExecutionResult",
    "ExecutionStatus",
    "BatchResult",
    "ParallelExecutor",
    "Reporter",
    "ConsoleReporter",
    # Errors
    "WorkspacesFilterError",
    "InvalidArgumentError",
    "ConfigurationError",
    "WorkspaceNotFoundError",
    "ManifestReadError",
    "ManifestParseError",
    "CommandExecutionError",
]
