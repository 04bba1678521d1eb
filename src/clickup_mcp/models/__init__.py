"""
ClickUp data models.

Pydantic models built from ClickUp API v2 responses. Each model exposes a
``from_api`` constructor; none of them is persisted.

Models:
    - User: the identity behind an access token
    - Workspace, Space, Folder, TaskList: the organizational tree
    - AggregatedListEntry, SpaceLists, ListTree: flattened tree walk results
    - TaskRecord: normalized task projection
    - TaskPage: one page of raw tasks from a workspace query
"""

from clickup_mcp.models.user import User
from clickup_mcp.models.workspace import (
    Workspace,
    Space,
    Folder,
    TaskList,
    AggregatedListEntry,
    SpaceLists,
    ListTree,
    SpaceStatus,
    CustomFieldDefinition,
)
from clickup_mcp.models.task import (
    TaskRecord,
    TaskPage,
    TaskRef,
    Assignee,
    CustomFieldValue,
    Comment,
    format_timestamp,
)

__all__ = [
    "User",
    "Workspace",
    "Space",
    "Folder",
    "TaskList",
    "AggregatedListEntry",
    "SpaceLists",
    "ListTree",
    "SpaceStatus",
    "CustomFieldDefinition",
    "TaskRecord",
    "TaskPage",
    "TaskRef",
    "Assignee",
    "CustomFieldValue",
    "Comment",
    "format_timestamp",
]
