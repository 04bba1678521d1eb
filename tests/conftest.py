"""
Pytest Configuration and Fixtures for ClickUp Client Tests.

This module provides fixtures, mock factories, and shared utilities for
testing the ClickUp client and its aggregation engine.

Architecture:
    - MockClickUpAPI: Async mock for ClickUpAPI with per-call failure injection
    - Factories: Generate test data (workspaces, spaces, folders, lists, tasks)
    - Fixtures: Provide configured clients and mock data
    - Markers: Custom pytest markers for test categorization
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator

import pytest

from clickup_mcp.client import ClickUpClient
from clickup_mcp.models import (
    Folder,
    Space,
    TaskList,
    TaskPage,
    User,
    Workspace,
    CustomFieldDefinition,
    SpaceStatus,
)
from clickup_mcp.exceptions import ClickUpAPIError, ClickUpNotFoundError


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "consent: Consent cookie tests")
    config.addinivalue_line("markers", "tree: Tree walker tests")
    config.addinivalue_line("markers", "tasks: Task-related tests")
    config.addinivalue_line("markers", "filters: Filter compiler tests")
    config.addinivalue_line("markers", "api: HTTP transport tests")
    config.addinivalue_line("markers", "errors: Error handling tests")


# =============================================================================
# Time Utilities
# =============================================================================


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def days_from_now(n: int) -> datetime:
    """Get datetime n days from now."""
    return utc_now() + timedelta(days=n)


def to_ms(dt: datetime) -> int:
    """Convert a datetime to Unix milliseconds."""
    return int(dt.timestamp() * 1000)


# =============================================================================
# ID Generators
# =============================================================================


class IDGenerator:
    """Sequential ID generator for test objects."""

    _counter: int = 0

    @classmethod
    def reset(cls) -> None:
        """Reset counter (call in fixtures)."""
        cls._counter = 0

    @classmethod
    def next_id(cls, prefix: str = "") -> str:
        """Generate next unique ID."""
        cls._counter += 1
        return f"{prefix}{90000 + cls._counter}"


def server_error(message: str = "ClickUp API error: 500") -> ClickUpAPIError:
    """An upstream 500 as the transport would raise it."""
    return ClickUpAPIError(message, status_code=500, operation="mock")


# =============================================================================
# Test Data Factories
# =============================================================================


class WorkspaceFactory:
    """Factory for creating Workspace test objects."""

    @staticmethod
    def create(id: str | None = None, name: str = "Test Workspace") -> Workspace:
        return Workspace(id=id or IDGenerator.next_id(), name=name)


class SpaceFactory:
    """Factory for creating Space test objects."""

    @staticmethod
    def create(
        id: str | None = None,
        name: str = "Test Space",
        workspace_id: str | None = None,
        archived: bool = False,
    ) -> Space:
        return Space(id=id or IDGenerator.next_id(), name=name, workspace_id=workspace_id, archived=archived)


class FolderFactory:
    """Factory for creating Folder test objects."""

    @staticmethod
    def create(id: str | None = None, name: str = "Test Folder", space_id: str | None = None) -> Folder:
        return Folder(id=id or IDGenerator.next_id(), name=name, space_id=space_id)


class ListFactory:
    """Factory for creating TaskList test objects."""

    @staticmethod
    def create(
        id: str | None = None,
        name: str = "Test List",
        space_id: str | None = None,
        folder_id: str | None = None,
        task_count: int | None = 0,
    ) -> TaskList:
        return TaskList(
            id=id or IDGenerator.next_id(),
            name=name,
            space_id=space_id,
            folder_id=folder_id,
            task_count=task_count,
        )


class TaskFactory:
    """Factory for raw ClickUp task payloads (as returned by the API)."""

    @staticmethod
    def create(
        id: str | None = None,
        name: str = "Test Task",
        status: str = "to do",
        priority: str | None = None,
        assignees: list[dict[str, Any]] | None = None,
        due_date: int | str | None = None,
        custom_fields: list[dict[str, Any]] | None = None,
        parent: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        task_id = id or IDGenerator.next_id("t")
        data: dict[str, Any] = {
            "id": task_id,
            "name": name,
            "status": {"status": status, "type": "open"},
            "priority": {"priority": priority, "color": "#f50000"} if priority else None,
            "assignees": assignees or [],
            "tags": [],
            "due_date": str(due_date) if due_date is not None else None,
            "date_created": "1735689600000",
            "date_updated": "1735689600000",
            "list": {"id": "list1", "name": "Inbox"},
            "space": {"id": "space1"},
            "parent": parent,
            "url": f"https://app.clickup.com/t/{task_id}",
            "custom_fields": custom_fields or [],
        }
        data.update(kwargs)
        return data

    @staticmethod
    def with_custom_field(field_id: str, value: Any, **kwargs: Any) -> dict[str, Any]:
        return TaskFactory.create(
            custom_fields=[{"id": field_id, "name": "Field", "type": "number", "value": value}],
            **kwargs,
        )

    @staticmethod
    def batch(count: int, prefix: str = "Task") -> list[dict[str, Any]]:
        return [TaskFactory.create(name=f"{prefix} {i}") for i in range(count)]


# =============================================================================
# Mock API
# =============================================================================


class MockClickUpAPI:
    """
    Mock for ClickUpAPI.

    Hierarchy and tasks are kept in plain dicts keyed by parent id. Failures
    are configured in ``should_fail`` keyed either by method name (every
    call fails) or ``"method:id"`` (only calls for that id fail).
    """

    def __init__(self):
        """Initialize mock with empty data stores."""
        self.user: User = User(id="42", username="tester", email="tester@example.com")
        self.workspaces: list[Workspace] = []
        self.spaces: dict[str, list[Space]] = {}
        self.folders: dict[str, list[Folder]] = {}
        self.space_lists: dict[str, list[TaskList]] = {}
        self.folder_lists: dict[str, list[TaskList]] = {}
        self.team_tasks: dict[str, list[dict[str, Any]]] = {}
        self.last_page: dict[str, bool | None] = {}
        self.tasks: dict[str, dict[str, Any]] = {}
        self.comments: dict[str, list[dict[str, Any]]] = {}
        self.subtasks: dict[str, list[dict[str, Any]]] = {}
        self.statuses: dict[str, list[SpaceStatus]] = {}
        self.fields: dict[str, list[CustomFieldDefinition]] = {}

        # Track method calls for verification
        self.call_history: list[tuple[str, tuple, dict]] = []

        # Configurable behaviors
        self.should_fail: dict[str, Exception | None] = {}
        self.delay: float = 0

        # Concurrency tracking
        self.in_flight: int = 0
        self.max_in_flight: int = 0

    def _record_call(self, method: str, args: tuple, kwargs: dict) -> None:
        """Record method call for verification."""
        self.call_history.append((method, args, kwargs))

    def _check_failure(self, method: str, key: str | None = None) -> None:
        """Raise the configured exception for this method or method:id."""
        for name in (method, f"{method}:{key}"):
            if self.should_fail.get(name):
                raise self.should_fail[name]

    async def _enter(self, method: str, key: str | None, args: tuple, kwargs: dict | None = None) -> None:
        self._record_call(method, args, kwargs or {})
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            self._check_failure(method, key)
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        """Mock close."""
        self._record_call("close", (), {})

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def add_workspace(self, workspace: Workspace) -> Workspace:
        self.workspaces.append(workspace)
        return workspace

    def add_space(self, workspace_id: str, space: Space) -> Space:
        self.spaces.setdefault(workspace_id, []).append(space)
        return space

    def add_folder(self, space_id: str, folder: Folder) -> Folder:
        self.folders.setdefault(space_id, []).append(folder)
        return folder

    def add_space_list(self, space_id: str, task_list: TaskList) -> TaskList:
        self.space_lists.setdefault(space_id, []).append(task_list)
        return task_list

    def add_folder_list(self, folder_id: str, task_list: TaskList) -> TaskList:
        self.folder_lists.setdefault(folder_id, []).append(task_list)
        return task_list

    # -------------------------------------------------------------------------
    # User & Workspaces
    # -------------------------------------------------------------------------

    async def get_user(self, access_token: str) -> User:
        await self._enter("get_user", None, (access_token,))
        return self.user

    async def get_workspaces(self, access_token: str) -> list[Workspace]:
        await self._enter("get_workspaces", None, (access_token,))
        return list(self.workspaces)

    # -------------------------------------------------------------------------
    # Hierarchy
    # -------------------------------------------------------------------------

    async def get_spaces(self, access_token: str, team_id: str, archived: bool | None = None) -> list[Space]:
        await self._enter("get_spaces", team_id, (access_token, team_id, archived))
        return list(self.spaces.get(team_id, []))

    async def get_folders(self, access_token: str, space_id: str, archived: bool | None = None) -> list[Folder]:
        await self._enter("get_folders", space_id, (access_token, space_id, archived))
        return list(self.folders.get(space_id, []))

    async def get_lists_in_space(
        self, access_token: str, space_id: str, archived: bool | None = None
    ) -> list[TaskList]:
        await self._enter("get_lists_in_space", space_id, (access_token, space_id, archived))
        return list(self.space_lists.get(space_id, []))

    async def get_lists_in_folder(
        self, access_token: str, folder_id: str, archived: bool | None = None
    ) -> list[TaskList]:
        await self._enter("get_lists_in_folder", folder_id, (access_token, folder_id, archived))
        return list(self.folder_lists.get(folder_id, []))

    async def get_space_statuses(self, access_token: str, space_id: str) -> list[SpaceStatus]:
        await self._enter("get_space_statuses", space_id, (access_token, space_id))
        return list(self.statuses.get(space_id, []))

    async def get_list_custom_fields(self, access_token: str, list_id: str) -> list[CustomFieldDefinition]:
        await self._enter("get_list_custom_fields", list_id, (access_token, list_id))
        return list(self.fields.get(list_id, []))

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def get_team_tasks(self, access_token: str, team_id: str, params: list[tuple[str, str]]) -> TaskPage:
        await self._enter("get_team_tasks", team_id, (access_token, team_id, list(params)))
        return TaskPage(tasks=list(self.team_tasks.get(team_id, [])), last_page=self.last_page.get(team_id))

    async def get_task(self, access_token: str, task_id: str) -> dict[str, Any]:
        await self._enter("get_task", task_id, (access_token, task_id))
        if task_id not in self.tasks:
            raise ClickUpNotFoundError("Resource not found", status_code=404, operation="get_task")
        return self.tasks[task_id]

    async def get_task_comments(self, access_token: str, task_id: str) -> list[dict[str, Any]]:
        await self._enter("get_task_comments", task_id, (access_token, task_id))
        return list(self.comments.get(task_id, []))

    async def get_subtasks(self, access_token: str, task_id: str, team_id: str) -> list[dict[str, Any]]:
        await self._enter("get_subtasks", task_id, (access_token, task_id, team_id))
        return list(self.subtasks.get(task_id, []))

    async def update_task(self, access_token: str, task_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        await self._enter("update_task", task_id, (access_token, task_id, payload))
        task = dict(self.tasks.get(task_id) or TaskFactory.create(id=task_id))
        if "name" in payload:
            task["name"] = payload["name"]
        if "description" in payload:
            task["description"] = payload["description"]
        if "status" in payload:
            task["status"] = {"status": payload["status"]}
        if "assignees" in payload:
            added = [{"id": a} for a in payload["assignees"].get("add", [])]
            task["assignees"] = [*task.get("assignees", []), *added]
        self.tasks[task_id] = task
        return task

    # -------------------------------------------------------------------------
    # Verification Helpers
    # -------------------------------------------------------------------------

    def get_calls(self, method_name: str) -> list[tuple[tuple, dict]]:
        """Get all calls to a specific method."""
        return [(args, kwargs) for name, args, kwargs in self.call_history if name == method_name]

    def assert_called(self, method_name: str, times: int | None = None) -> None:
        """Assert a method was called (optionally a specific number of times)."""
        calls = self.get_calls(method_name)
        if times is not None:
            assert len(calls) == times, f"Expected {method_name} to be called {times} times, got {len(calls)}"
        else:
            assert len(calls) > 0, f"Expected {method_name} to be called at least once"

    def assert_not_called(self, method_name: str) -> None:
        """Assert a method was not called."""
        calls = self.get_calls(method_name)
        assert len(calls) == 0, f"Expected {method_name} not to be called, but was called {len(calls)} times"

    def params_for(self, team_id: str) -> list[tuple[str, str]]:
        """Query parameters of the last team task call for a workspace."""
        calls = [args for args, _ in self.get_calls("get_team_tasks") if args[1] == team_id]
        assert calls, f"No get_team_tasks call for workspace {team_id}"
        return calls[-1][2]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def id_generator():
    """Reset IDs so each test starts from the same sequence."""
    IDGenerator.reset()
    return IDGenerator


@pytest.fixture
def mock_api() -> MockClickUpAPI:
    """Create a fresh mock API instance."""
    return MockClickUpAPI()


@pytest.fixture
def two_workspaces(mock_api: MockClickUpAPI) -> tuple[Workspace, Workspace]:
    """Seed two workspaces, 1 and 2."""
    w1 = mock_api.add_workspace(WorkspaceFactory.create(id="1", name="Alpha"))
    w2 = mock_api.add_workspace(WorkspaceFactory.create(id="2", name="Beta"))
    return w1, w2


@pytest.fixture
async def client(mock_api: MockClickUpAPI) -> AsyncIterator[ClickUpClient]:
    """
    Create a ClickUpClient wired to the mock API.

    The internal API is replaced so no HTTP client is ever created.
    """
    client = ClickUpClient(
        access_token="test_token",
        max_concurrency=4,
        display_timezone="UTC",
        cookie_secret="test_cookie_secret",
    )
    client._api = mock_api

    yield client

    client._api = None
