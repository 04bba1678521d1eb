"""
Pydantic Input Models for ClickUp MCP Tools.

This module defines all input validation models used by MCP tools.
Each model includes proper field constraints and descriptions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from clickup_mcp.aggregation import SearchFilter
from clickup_mcp.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PRIORITY_NAMES


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    MARKDOWN = "markdown"
    JSON = "json"


class BaseMCPInput(BaseModel):
    """Base input model with common configuration."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )


class FormatOnlyInput(BaseMCPInput):
    """Input for tools that take no parameters besides the output format."""

    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' for human-readable, 'json' for machine-readable",
    )


# =============================================================================
# Hierarchy Input Models
# =============================================================================


class AllListsInput(BaseMCPInput):
    """Input for listing every list across workspaces."""

    team_id: Optional[str] = Field(
        default=None,
        description="Workspace (team) ID to limit the walk to. Omit for all workspaces.",
    )
    archived: Optional[bool] = Field(
        default=None,
        description="Include archived spaces, folders and lists",
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )


class SpaceStatusesInput(BaseMCPInput):
    """Input for listing the statuses available in a space."""

    space_id: str = Field(..., description="Space identifier", min_length=1)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )


class CustomFieldsInput(BaseMCPInput):
    """Input for listing a list's custom field definitions."""

    list_id: str = Field(..., description="List identifier", min_length=1)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )


# =============================================================================
# Task Search Input Models
# =============================================================================


class MyTasksInput(BaseMCPInput):
    """Input for listing tasks assigned to the current user."""

    team_id: Optional[str] = Field(
        default=None,
        description="Workspace (team) ID. Omit to search every workspace.",
    )
    limit: int = Field(
        default=DEFAULT_PAGE_SIZE,
        description="Page size",
        ge=1,
        le=MAX_PAGE_SIZE,
    )
    page: int = Field(default=0, description="Page number (0-based)", ge=0)
    statuses: Optional[List[str]] = Field(
        default=None,
        description="Only tasks in these statuses (e.g., ['in progress', 'review'])",
    )
    include_subtasks: Optional[bool] = Field(default=None, description="Include subtasks")
    include_closed: bool = Field(default=False, description="Include closed tasks")
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )


class SearchInput(BaseMCPInput):
    """Input for keyword task search."""

    search_term: str = Field(
        ...,
        description="Keyword matched against task names and descriptions",
        min_length=1,
        max_length=200,
    )
    team_id: Optional[str] = Field(
        default=None,
        description="Workspace (team) ID. Omit to search every workspace.",
    )
    limit: int = Field(default=DEFAULT_PAGE_SIZE, description="Page size", ge=1, le=MAX_PAGE_SIZE)
    page: int = Field(default=0, description="Page number (0-based)", ge=0)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )

    @field_validator("search_term")
    @classmethod
    def validate_search_term(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Search term cannot be empty or whitespace only")
        return v.strip()


class AdvancedSearchInput(BaseMCPInput):
    """Input for advanced, multi-criteria task search."""

    search_term: Optional[str] = Field(default=None, description="Keyword to match", max_length=200)
    statuses: Optional[List[str]] = Field(default=None, description="Status names to include")
    priorities: Optional[List[str]] = Field(
        default=None,
        description="Priority levels: 'urgent', 'high', 'normal', 'low'",
    )
    assignee_ids: Optional[List[str]] = Field(default=None, description="Assignee user IDs")
    creator_ids: Optional[List[str]] = Field(default=None, description="Creator user IDs")
    tags: Optional[List[str]] = Field(default=None, description="Tag names")
    due_date_from: Optional[int] = Field(default=None, description="Due on or after (Unix ms)")
    due_date_to: Optional[int] = Field(default=None, description="Due on or before (Unix ms)")
    start_date_from: Optional[int] = Field(default=None, description="Starts on or after (Unix ms)")
    start_date_to: Optional[int] = Field(default=None, description="Starts on or before (Unix ms)")
    created_date_from: Optional[int] = Field(default=None, description="Created on or after (Unix ms)")
    created_date_to: Optional[int] = Field(default=None, description="Created on or before (Unix ms)")
    updated_date_from: Optional[int] = Field(default=None, description="Updated on or after (Unix ms)")
    updated_date_to: Optional[int] = Field(default=None, description="Updated on or before (Unix ms)")
    parent_task_id: Optional[str] = Field(default=None, description="Only subtasks of this task")
    include_subtasks: Optional[bool] = Field(default=None, description="Include subtasks")
    include_archived: Optional[bool] = Field(default=None, description="Include archived tasks")
    include_closed: bool = Field(default=False, description="Include closed tasks")
    custom_fields: Optional[Dict[str, Any]] = Field(
        default=None,
        description=(
            "Custom field constraints by field ID: a value for equality, a list of accepted "
            "values, or {'min': x, 'max': y} for an inclusive numeric range"
        ),
    )
    team_id: Optional[str] = Field(default=None, description="Workspace (team) ID")
    limit: int = Field(default=DEFAULT_PAGE_SIZE, description="Page size", ge=1, le=MAX_PAGE_SIZE)
    page: int = Field(default=0, description="Page number (0-based)", ge=0)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )

    @field_validator("priorities")
    @classmethod
    def normalize_priorities(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        normalized = [p.lower() for p in v]
        unknown = [p for p in normalized if p not in PRIORITY_NAMES]
        if unknown:
            raise ValueError(f"Unknown priorities {unknown}; expected one of {PRIORITY_NAMES}")
        return normalized

    def to_filter(self) -> SearchFilter:
        return SearchFilter(**self.model_dump(exclude={"response_format"}))


# =============================================================================
# Task Input Models
# =============================================================================


class TaskGetInput(BaseMCPInput):
    """Input for getting a task by ID."""

    task_id: str = Field(..., description="Task identifier", min_length=1)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )


class TaskDetailInput(BaseMCPInput):
    """Input for getting a task with comments and subtasks."""

    task_id: str = Field(..., description="Task identifier", min_length=1)
    team_id: str = Field(..., description="Workspace (team) ID the task belongs to", min_length=1)
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )


class TaskUpdateInput(BaseMCPInput):
    """Input for updating a task."""

    task_id: str = Field(..., description="Task identifier to update", min_length=1)
    name: Optional[str] = Field(default=None, description="New task name", min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, description="New description", max_length=10000)
    status: Optional[str] = Field(default=None, description="New status name")
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )


class TaskAssignInput(BaseMCPInput):
    """Input for changing a task's assignees."""

    task_id: str = Field(..., description="Task identifier", min_length=1)
    assignee_ids: List[str] = Field(..., description="User IDs to add", min_length=1)
    remove_assignee_ids: Optional[List[str]] = Field(default=None, description="User IDs to remove")
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format",
    )
