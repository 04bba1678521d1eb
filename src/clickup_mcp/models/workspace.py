"""
Organizational tree models.

ClickUp nests Workspace (called "team" upstream) → Space → Folder → List.
Lists may also sit directly under a Space. Parent links are ids only.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from clickup_mcp.constants import ListLocation


class _Node(BaseModel):
    """Common base: ClickUp ids arrive as strings or integers."""

    id: str
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)


class Workspace(_Node):
    """Top-level ClickUp team."""

    color: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Workspace:
        return cls(id=data["id"], name=data.get("name") or "Unknown Team", color=data.get("color"))

    @classmethod
    def placeholder(cls, workspace_id: str) -> Workspace:
        """Stand-in for a requested workspace the token cannot list."""
        return cls(id=workspace_id, name=f"Team {workspace_id}")


class Space(_Node):
    archived: bool = False
    workspace_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], workspace_id: str | None = None) -> Space:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            archived=bool(data.get("archived", False)),
            workspace_id=workspace_id,
        )


class Folder(_Node):
    archived: bool = False
    space_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], space_id: str | None = None) -> Folder:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            archived=bool(data.get("archived", False)),
            space_id=space_id,
        )


class TaskList(_Node):
    """A ClickUp List, the direct parent of tasks."""

    archived: bool = False
    task_count: int | None = None
    space_id: str | None = None
    folder_id: str | None = None

    @classmethod
    def from_api(
        cls,
        data: dict[str, Any],
        space_id: str | None = None,
        folder_id: str | None = None,
    ) -> TaskList:
        task_count = data.get("task_count")
        space_ref = (data.get("space") or {}).get("id")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            archived=bool(data.get("archived", False)),
            task_count=int(task_count) if task_count is not None else None,
            space_id=space_id or (str(space_ref) if space_ref is not None else None),
            folder_id=folder_id,
        )


class AggregatedListEntry(BaseModel):
    """A list tagged with where it was found."""

    id: str
    name: str
    archived: bool = False
    task_count: int | None = None
    location: ListLocation
    workspace_id: str
    workspace_name: str
    space_id: str
    space_name: str
    folder_id: str | None = None
    folder_name: str | None = None

    @classmethod
    def in_space(cls, task_list: TaskList, workspace: Workspace, space: Space) -> AggregatedListEntry:
        return cls(
            id=task_list.id,
            name=task_list.name,
            archived=task_list.archived,
            task_count=task_list.task_count,
            location=ListLocation.SPACE,
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            space_id=space.id,
            space_name=space.name,
        )

    @classmethod
    def in_folder(
        cls,
        task_list: TaskList,
        workspace: Workspace,
        space: Space,
        folder: Folder,
    ) -> AggregatedListEntry:
        return cls(
            id=task_list.id,
            name=task_list.name,
            archived=task_list.archived,
            task_count=task_list.task_count,
            location=ListLocation.FOLDER,
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            space_id=space.id,
            space_name=space.name,
            folder_id=folder.id,
            folder_name=folder.name,
        )


class SpaceLists(BaseModel):
    """All lists found under one space."""

    workspace_id: str
    workspace_name: str
    space_id: str
    space_name: str
    lists: list[AggregatedListEntry] = Field(default_factory=list)


class ListTree(BaseModel):
    """Result of walking the workspace tree.

    ``success`` stays True when branches failed; ``partial`` and
    ``warnings`` say which ones.
    """

    success: bool = True
    data: list[SpaceLists] = Field(default_factory=list)
    total_lists: int = 0
    partial: bool = False
    warnings: list[str] = Field(default_factory=list)


class SpaceStatus(BaseModel):
    status: str
    type: str | None = None
    color: str | None = None
    orderindex: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SpaceStatus:
        order = data.get("orderindex")
        return cls(
            status=data.get("status", ""),
            type=data.get("type"),
            color=data.get("color"),
            orderindex=int(order) if order is not None else None,
        )


class CustomFieldDefinition(BaseModel):
    id: str
    name: str
    type: str | None = None
    type_config: dict[str, Any] = Field(default_factory=dict)
    required: bool | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CustomFieldDefinition:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            type=data.get("type"),
            type_config=data.get("type_config") or {},
            required=data.get("required"),
        )
