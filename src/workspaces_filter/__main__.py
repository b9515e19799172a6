"""Allow running as ``python -m workspaces_filter``."""

from workspaces_filter.cli.app import main

if __name__ == "__main__":
    main()
