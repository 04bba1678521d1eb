"""
Response formatting for ClickUp MCP tools.

Markdown for people, JSON for programs. JSON output is the pydantic dump of
the result models.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from clickup_mcp.aggregation import TaskSearchResult
from clickup_mcp.models import (
    CustomFieldDefinition,
    ListTree,
    SpaceStatus,
    TaskRecord,
    User,
    Workspace,
)

PRIORITY_ICONS = {"urgent": "🚨", "high": "🔴", "normal": "🟡", "low": "🟢"}


def to_json(data: Any) -> str:
    """Serialize models (or containers of models) to indented JSON."""
    return json.dumps(_jsonable(data), indent=2, ensure_ascii=False)


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, dict):
        return {k: _jsonable(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_jsonable(v) for v in data]
    return data


def success_message(message: str) -> str:
    return f"✅ {message}"


def error_message(message: str, hint: str | None = None) -> str:
    text = f"❌ Error: {message}"
    if hint:
        text += f"\n\n💡 {hint}"
    return text


# =============================================================================
# User & Workspaces
# =============================================================================


def format_user_markdown(user: User) -> str:
    return "\n".join([
        "# ClickUp User",
        "",
        f"- **ID**: `{user.id}`",
        f"- **Username**: {user.username or 'N/A'}",
        f"- **Email**: {user.email or 'N/A'}",
    ])


def format_workspaces_markdown(workspaces: list[Workspace]) -> str:
    lines = ["# Workspaces", ""]
    if not workspaces:
        lines.append("No workspaces available for this token.")
    for ws in workspaces:
        lines.append(f"- **{ws.name}** (`{ws.id}`)")
    return "\n".join(lines)


# =============================================================================
# Hierarchy
# =============================================================================


def format_list_tree_markdown(tree: ListTree) -> str:
    lines = ["# All Lists", "", f"**Total lists**: {tree.total_lists}", ""]

    for group in tree.data:
        lines.append(f"## {group.workspace_name} / {group.space_name}")
        if not group.lists:
            lines.append("_No lists_")
        for entry in group.lists:
            where = f"📁 {entry.folder_name}" if entry.folder_name else "space"
            lines.append(f"- **{entry.name}** (`{entry.id}`) in {where}")
        lines.append("")

    if tree.warnings:
        lines.append("### ⚠️ Partial results")
        lines.extend(f"- {w}" for w in tree.warnings)
    return "\n".join(lines).rstrip()


def format_statuses_markdown(space_id: str, statuses: list[SpaceStatus]) -> str:
    lines = [f"# Statuses in space `{space_id}`", ""]
    if not statuses:
        lines.append("No statuses found.")
    for status in statuses:
        lines.append(f"- **{status.status}** ({status.type or 'custom'})")
    return "\n".join(lines)


def format_custom_fields_markdown(list_id: str, fields: list[CustomFieldDefinition]) -> str:
    lines = [f"# Custom fields for list `{list_id}`", ""]
    if not fields:
        lines.append("No custom fields defined.")
    for field in fields:
        lines.append(f"- **{field.name}** (`{field.id}`, {field.type or 'unknown'})")
    return "\n".join(lines)


# =============================================================================
# Tasks
# =============================================================================


def format_task_markdown(task: TaskRecord) -> str:
    icon = PRIORITY_ICONS.get(task.priority or "", "⚪")
    lines = [f"## {icon} {task.name}", "", f"- **ID**: `{task.id}`"]

    if task.status:
        lines.append(f"- **Status**: {task.status}")
    if task.priority:
        lines.append(f"- **Priority**: {task.priority}")
    if task.due_date_readable:
        lines.append(f"- **Due**: {task.due_date_readable}")
    if task.assignees:
        names = ", ".join(a.username or a.id for a in task.assignees)
        lines.append(f"- **Assignees**: {names}")
    if task.tags:
        lines.append(f"- **Tags**: {', '.join(task.tags)}")

    location = [ref.name for ref in (task.space_ref, task.folder_ref, task.list_ref) if ref and ref.name]
    if location:
        lines.append(f"- **Location**: {' / '.join(location)}")
    if task.workspace_name:
        lines.append(f"- **Workspace**: {task.workspace_name}")
    if task.url:
        lines.append(f"- **URL**: {task.url}")
    if task.description:
        lines.extend(["", task.description])
    return "\n".join(lines)


def format_task_search_markdown(title: str, result: TaskSearchResult) -> str:
    p = result.pagination
    lines = [
        f"# {title}",
        "",
        f"**Total**: {result.total_tasks} | **Page**: {p.page} | **Limit**: {p.limit}",
        f"📄 More results on page {p.next_page}" if p.has_more else "✅ No more results",
        "",
    ]
    if not result.tasks:
        lines.append("No tasks found.")
    for task in result.tasks:
        lines.extend([format_task_markdown(task), ""])

    if result.warnings:
        lines.append("### ⚠️ Partial results")
        lines.extend(f"- {w}" for w in result.warnings)
    return "\n".join(lines).rstrip()


def format_task_detail_markdown(detail: dict[str, Any]) -> str:
    lines = [format_task_markdown(detail["task"]), ""]

    lines.append(f"### Subtasks ({len(detail['subtasks'])})")
    for sub in detail["subtasks"]:
        lines.append(f"- {sub.name} (`{sub.id}`) {sub.status or ''}".rstrip())

    lines.extend(["", f"### Comments ({detail['comment_count']})"])
    for comment in detail["comments"]:
        when = f" {comment.date_readable}" if comment.date_readable else ""
        lines.append(f"- **{comment.user or 'unknown'}**{when}: {comment.text}")
    return "\n".join(lines)
