"""
Task models.

TaskRecord is the normalized projection of a ClickUp task returned to MCP
callers. Raw timestamps are Unix milliseconds; each has a ``*_readable``
companion rendered in the configured display timezone.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

READABLE_FORMAT = "%Y/%m/%d %H:%M:%S"


def resolve_timezone(name: str | None) -> tzinfo:
    """Look up an IANA zone, using UTC when it is unknown."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown display timezone %r, using UTC", name)
        return timezone.utc


def parse_timestamp(value: Any) -> int | None:
    """Parse a ClickUp millisecond timestamp. Never raises."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def read_timestamp(value: Any, tz: tzinfo | None = None) -> tuple[int | None, str | None]:
    """Parse a millisecond timestamp together with its readable form.

    A value that cannot be placed on the calendar counts as unparsable, so
    the readable form is None exactly when the raw value is null, zero or
    unparsable.
    """
    ms = parse_timestamp(value)
    if not ms:
        return ms, None
    try:
        moment = datetime.fromtimestamp(ms / 1000, tz or timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None, None
    return ms, moment.strftime(READABLE_FORMAT)


def format_timestamp(value: Any, tz: tzinfo | None = None) -> str | None:
    """Render a millisecond timestamp for humans.

    Returns None when the value is null, zero or unparsable.
    """
    return read_timestamp(value, tz)[1]


def _dicts(items: Any) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


class Assignee(BaseModel):
    id: str
    username: str | None = None
    email: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Assignee:
        return cls(id=str(data.get("id")), username=data.get("username"), email=data.get("email"))


class TaskRef(BaseModel):
    """Id/name pointer to a task's list, folder or space."""

    id: str
    name: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> TaskRef | None:
        if not isinstance(data, dict) or data.get("id") is None:
            return None
        return cls(id=str(data["id"]), name=data.get("name"))


class CustomFieldValue(BaseModel):
    """A custom field as attached to a task."""

    id: str
    name: str | None = None
    type: str | None = None
    value: Any = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CustomFieldValue:
        return cls(
            id=str(data.get("id")),
            name=data.get("name"),
            type=data.get("type"),
            value=data.get("value"),
        )


class Comment(BaseModel):
    id: str
    text: str = ""
    user: str | None = None
    date: int | None = None
    date_readable: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], tz: tzinfo | None = None) -> Comment:
        user = data.get("user")
        user = user if isinstance(user, dict) else {}
        date, date_readable = read_timestamp(data.get("date"), tz)
        return cls(
            id=str(data.get("id")),
            text=data.get("comment_text") or "",
            user=user.get("username"),
            date=date,
            date_readable=date_readable,
        )


class TaskRecord(BaseModel):
    """Normalized ClickUp task."""

    id: str
    name: str
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    priority_color: str | None = None
    assignees: list[Assignee] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    due_date: int | None = None
    due_date_readable: str | None = None
    start_date: int | None = None
    start_date_readable: str | None = None
    date_created: int | None = None
    date_created_readable: str | None = None
    date_updated: int | None = None
    date_updated_readable: str | None = None
    date_done: int | None = None
    date_done_readable: str | None = None

    list_ref: TaskRef | None = None
    folder_ref: TaskRef | None = None
    space_ref: TaskRef | None = None
    parent: str | None = None
    url: str | None = None
    time_estimate: int | None = None
    time_spent: int | None = None
    custom_fields: list[CustomFieldValue] = Field(default_factory=list)

    # Set when the task came out of a cross-workspace aggregation
    workspace_id: str | None = None
    workspace_name: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], tz: tzinfo | None = None) -> TaskRecord:
        status = data.get("status") or {}
        priority = data.get("priority") or {}
        parent = data.get("parent")

        dates: dict[str, Any] = {}
        for key in ("due_date", "start_date", "date_created", "date_updated", "date_done"):
            dates[key], dates[f"{key}_readable"] = read_timestamp(data.get(key), tz)

        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or None,
            status=status.get("status") if isinstance(status, dict) else str(status),
            priority=priority.get("priority") if isinstance(priority, dict) else None,
            priority_color=priority.get("color") if isinstance(priority, dict) else None,
            assignees=[Assignee.from_api(a) for a in _dicts(data.get("assignees"))],
            tags=[str(t["name"]) for t in _dicts(data.get("tags")) if t.get("name")],
            list_ref=TaskRef.from_api(data.get("list")),
            folder_ref=TaskRef.from_api(data.get("folder")),
            space_ref=TaskRef.from_api(data.get("space")),
            parent=str(parent) if parent else None,
            url=data.get("url") or None,
            time_estimate=parse_timestamp(data.get("time_estimate")),
            time_spent=parse_timestamp(data.get("time_spent")),
            custom_fields=[CustomFieldValue.from_api(cf) for cf in _dicts(data.get("custom_fields"))],
            **dates,
        )

    def custom_field(self, field_id: str) -> CustomFieldValue | None:
        return next((cf for cf in self.custom_fields if cf.id == field_id), None)

    def with_workspace(self, workspace_id: str, workspace_name: str) -> TaskRecord:
        return self.model_copy(update={"workspace_id": workspace_id, "workspace_name": workspace_name})


class TaskPage(BaseModel):
    """One page of raw tasks from ``GET /team/{id}/task``.

    ``last_page`` is the upstream end-of-results signal when present.
    """

    tasks: list[dict[str, Any]] = Field(default_factory=list)
    last_page: bool | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TaskPage:
        tasks = data.get("tasks")
        last_page = data.get("last_page")
        return cls(
            tasks=_dicts(tasks),
            last_page=last_page if isinstance(last_page, bool) else None,
        )
