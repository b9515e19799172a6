"""Package selection filters."""

from workspaces_filter.filters.scope import (
    filter_graph,
    match_package,
    parse_patterns,
    selects_all,
)

__all__ = [
    "filter_graph",
    "match_package",
    "parse_patterns",
    "selects_all",
]
