"""
Cross-workspace aggregation.

    - tree: walks workspace → space → folder → list
    - tasks: merges per-workspace task pages (assigned, search, advanced)
    - filters: splits a SearchFilter into query params and a local predicate

Failures below the workspace enumeration are isolated per branch and
reported as warnings; only root failures raise AggregationError.
"""

from clickup_mcp.aggregation.filters import (
    CompiledFilter,
    SearchFilter,
    compile_filter,
    date_range_filter,
    default_filter,
    matches_custom_fields,
    priority_filter,
)
from clickup_mcp.aggregation.tasks import Pagination, TaskAggregator, TaskSearchResult
from clickup_mcp.aggregation.tree import TreeWalker

__all__ = [
    "CompiledFilter",
    "SearchFilter",
    "compile_filter",
    "date_range_filter",
    "default_filter",
    "matches_custom_fields",
    "priority_filter",
    "Pagination",
    "TaskAggregator",
    "TaskSearchResult",
    "TreeWalker",
]
