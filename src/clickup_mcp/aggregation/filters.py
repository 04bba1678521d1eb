"""
Search filter compiler.

A SearchFilter is split in two: everything the ClickUp team task endpoint
can filter on becomes query parameters, and ``custom_fields`` becomes a
predicate evaluated locally on the fetched page. All criteria are ANDed.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from clickup_mcp.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, TaskPriority
from clickup_mcp.models import TaskRecord


class SearchFilter(BaseModel):
    """Criteria for an advanced task search.

    Field names accept both snake_case and the camelCase used by MCP
    callers (``dueDateFrom``, ``customFields``...). Date bounds are
    inclusive Unix milliseconds.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    search_term: Optional[str] = None

    statuses: Optional[list[str]] = None
    priorities: Optional[list[Union[int, str]]] = None
    assignee_ids: Optional[list[str]] = None
    creator_ids: Optional[list[str]] = None
    tags: Optional[list[str]] = None

    due_date_from: Optional[int] = None
    due_date_to: Optional[int] = None
    start_date_from: Optional[int] = None
    start_date_to: Optional[int] = None
    created_date_from: Optional[int] = None
    created_date_to: Optional[int] = None
    updated_date_from: Optional[int] = None
    updated_date_to: Optional[int] = None

    parent_task_id: Optional[str] = None

    include_subtasks: Optional[bool] = None
    include_archived: Optional[bool] = None
    include_closed: bool = False

    custom_fields: Optional[dict[str, Any]] = None

    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    page: int = Field(default=0, ge=0)

    team_id: Optional[str] = None

    @field_validator("priorities")
    @classmethod
    def normalize_priorities(cls, v: Optional[list[Union[int, str]]]) -> Optional[list[int]]:
        if v is None:
            return None
        return [_priority_value(p) for p in v]

    @field_validator("assignee_ids", "creator_ids", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(item) for item in v]
        return v


def _priority_value(priority: Union[int, str]) -> int:
    if isinstance(priority, int) and not isinstance(priority, bool):
        return int(TaskPriority(priority))
    if isinstance(priority, str) and priority.strip().isdigit():
        return int(TaskPriority(int(priority)))
    return int(TaskPriority.from_name(str(priority)))


class CompiledFilter(BaseModel):
    """Remote query parameters plus the locally evaluated remainder."""

    params: list[tuple[str, str]]
    custom_fields: Optional[dict[str, Any]] = None

    def apply(self, tasks: Iterable[TaskRecord]) -> list[TaskRecord]:
        if not self.custom_fields:
            return list(tasks)
        return [task for task in tasks if matches_custom_fields(task, self.custom_fields)]


# (filter attribute, query parameter, offset making the strict upstream bound inclusive)
_DATE_BOUNDS = (
    ("due_date_from", "due_date_gt", -1),
    ("due_date_to", "due_date_lt", 1),
    ("start_date_from", "start_date_gt", -1),
    ("start_date_to", "start_date_lt", 1),
    ("created_date_from", "date_created_gt", -1),
    ("created_date_to", "date_created_lt", 1),
    ("updated_date_from", "date_updated_gt", -1),
    ("updated_date_to", "date_updated_lt", 1),
)

_MULTI_VALUED = (
    ("statuses", "statuses[]"),
    ("priorities", "priorities[]"),
    ("assignee_ids", "assignees[]"),
    ("creator_ids", "creators[]"),
    ("tags", "tags[]"),
)


def _flag(value: bool) -> str:
    return "true" if value else "false"


def compile_filter(search_filter: SearchFilter) -> CompiledFilter:
    """Translate a SearchFilter into team-task query parameters."""
    f = search_filter
    params: list[tuple[str, str]] = []

    if f.search_term:
        params.append(("search", f.search_term))

    params.append(("limit", str(f.limit)))
    params.append(("page", str(f.page)))

    for attr, name in _MULTI_VALUED:
        for value in getattr(f, attr) or []:
            params.append((name, str(value)))

    if f.parent_task_id:
        params.append(("parent", f.parent_task_id))

    for attr, name, offset in _DATE_BOUNDS:
        bound = getattr(f, attr)
        if bound is not None:
            params.append((name, str(bound + offset)))

    if f.include_subtasks is not None:
        params.append(("subtasks", _flag(f.include_subtasks)))
    if f.include_archived is not None:
        params.append(("include_archived", _flag(f.include_archived)))
    params.append(("include_closed", _flag(f.include_closed)))

    return CompiledFilter(params=params, custom_fields=f.custom_fields or None)


# =============================================================================
# Custom Field Predicate
# =============================================================================


def _is_range(expected: Any) -> bool:
    return isinstance(expected, Mapping) and "min" in expected and "max" in expected


def _is_collection(expected: Any) -> bool:
    return isinstance(expected, (list, tuple, set, frozenset))


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _same(actual: Any, expected: Any) -> bool:
    # Booleans never equal numbers
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def custom_field_matches(actual: Any, expected: Any) -> bool:
    """Check one custom field value against its expected constraint."""
    if _is_range(expected):
        number = _to_number(actual)
        low, high = _to_number(expected["min"]), _to_number(expected["max"])
        if number is None or low is None or high is None:
            return False
        return low <= number <= high
    if _is_collection(expected):
        return any(_same(actual, item) for item in expected)
    return _same(actual, expected)


def matches_custom_fields(task: TaskRecord, custom_fields: Mapping[str, Any]) -> bool:
    """True when every listed field exists on the task and matches.

    A task without one of the fields never matches.
    """
    for field_id, expected in custom_fields.items():
        field = task.custom_field(field_id)
        if field is None or not custom_field_matches(field.value, expected):
            return False
    return True


# =============================================================================
# Helpers
# =============================================================================


def default_filter(**overrides: Any) -> SearchFilter:
    """A filter with the usual defaults: first page of 15, open tasks, subtasks included."""
    values: dict[str, Any] = {
        "limit": DEFAULT_PAGE_SIZE,
        "page": 0,
        "include_closed": False,
        "include_archived": False,
        "include_subtasks": True,
    }
    values.update(overrides)
    return SearchFilter(**values)


def priority_filter(priorities: Iterable[str]) -> list[int]:
    """Map priority names to ClickUp's numeric levels, preserving order."""
    return [int(TaskPriority.from_name(p)) for p in priorities]


def date_range_filter(from_date: datetime, to_date: datetime) -> tuple[int, int]:
    """Convert a datetime range to millisecond bounds."""
    return int(from_date.timestamp() * 1000), int(to_date.timestamp() * 1000)
