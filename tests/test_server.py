"""
MCP Tool Tests.

This module calls the tool functions directly with a stub context and
checks their markdown and JSON output, including error rendering.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from clickup_mcp import server
from clickup_mcp.exceptions import AggregationError, ClickUpAuthenticationError
from clickup_mcp.tools.inputs import (
    AdvancedSearchInput,
    AllListsInput,
    FormatOnlyInput,
    MyTasksInput,
    ResponseFormat,
    SearchInput,
    TaskDetailInput,
)

from tests.conftest import (
    FolderFactory,
    ListFactory,
    SpaceFactory,
    TaskFactory,
    WorkspaceFactory,
    server_error,
)

if TYPE_CHECKING:
    from clickup_mcp.client import ClickUpClient
    from tests.conftest import MockClickUpAPI


pytestmark = [pytest.mark.unit]


@pytest.fixture
def ctx(client: ClickUpClient) -> SimpleNamespace:
    """Stub of the MCP request context carrying the lifespan client."""
    return SimpleNamespace(request_context=SimpleNamespace(lifespan_context={"client": client}))


# =============================================================================
# Hierarchy Tools
# =============================================================================


class TestListTools:
    """Tests for clickup_get_all_lists."""

    @pytest.fixture(autouse=True)
    def seed(self, mock_api: MockClickUpAPI):
        mock_api.add_workspace(WorkspaceFactory.create(id="W1", name="Acme"))
        mock_api.add_space("W1", SpaceFactory.create(id="S1", name="Eng"))
        mock_api.add_space_list("S1", ListFactory.create(id="L1", name="Backlog"))
        mock_api.add_folder("S1", FolderFactory.create(id="F1", name="Q1"))
        mock_api.add_folder_list("F1", ListFactory.create(id="L2", name="Sprint"))

    async def test_json(self, ctx):
        """Test JSON output matches the list tree shape."""
        out = json.loads(
            await server.clickup_get_all_lists(AllListsInput(response_format=ResponseFormat.JSON), ctx)
        )

        assert out["success"] is True
        assert out["total_lists"] == 2
        assert out["data"][0]["lists"][1]["location"] == "folder"
        assert out["data"][0]["lists"][1]["folder_name"] == "Q1"

    async def test_markdown(self, ctx):
        """Test markdown output names spaces and folders."""
        out = await server.clickup_get_all_lists(AllListsInput(), ctx)

        assert "## Acme / Eng" in out
        assert "**Backlog**" in out
        assert "📁 Q1" in out

    async def test_partial_markdown(self, ctx, mock_api: MockClickUpAPI):
        """Test warnings are listed when a branch failed."""
        mock_api.should_fail["get_lists_in_folder"] = server_error()

        out = await server.clickup_get_all_lists(AllListsInput(), ctx)

        assert "Partial results" in out
        assert "Folder F1 skipped" in out

    async def test_root_failure(self, ctx, mock_api: MockClickUpAPI):
        """Test a root failure is rendered as an error message."""
        mock_api.should_fail["get_workspaces"] = server_error()

        out = await server.clickup_get_all_lists(AllListsInput(), ctx)

        assert out.startswith("❌ Error: get_all_lists failed")


# =============================================================================
# Task Tools
# =============================================================================


class TestTaskTools:
    """Tests for the task search and detail tools."""

    @pytest.fixture(autouse=True)
    def seed(self, mock_api: MockClickUpAPI):
        mock_api.add_workspace(WorkspaceFactory.create(id="1", name="Alpha"))
        mock_api.team_tasks["1"] = [TaskFactory.create(id="a", name="Write report", priority="urgent")]

    async def test_my_tasks_json(self, ctx):
        """Test JSON output of get_my_tasks."""
        out = json.loads(
            await server.clickup_get_my_tasks(MyTasksInput(response_format=ResponseFormat.JSON), ctx)
        )

        assert out["scope"] == "assigned"
        assert out["user_id"] == "42"
        assert out["tasks"][0]["workspace_name"] == "Alpha"
        assert out["pagination"] == {"limit": 15, "page": 0, "has_more": False, "next_page": 1}

    async def test_search_markdown(self, ctx):
        """Test markdown output of search_tasks."""
        out = await server.clickup_search_tasks(SearchInput(search_term="  report "), ctx)

        assert out.startswith("# Search: report")
        assert "🚨 Write report" in out

    async def test_advanced_search(self, ctx, mock_api: MockClickUpAPI):
        """Test the advanced tool compiles its input into query parameters."""
        params = AdvancedSearchInput(
            priorities=["Urgent"],
            due_date_to=2000,
            response_format=ResponseFormat.JSON,
        )

        out = json.loads(await server.clickup_search_tasks_advanced(params, ctx))

        assert out["filters"]["priorities"] == [1]
        assert out["filters"]["dueDateTo"] == 2000
        assert ("priorities[]", "1") in mock_api.params_for("1")
        assert ("due_date_lt", "2001") in mock_api.params_for("1")

    async def test_task_detail_markdown(self, ctx, mock_api: MockClickUpAPI):
        """Test task detail renders subtasks and comments."""
        mock_api.tasks["a"] = TaskFactory.create(id="a", name="Write report")
        mock_api.subtasks["a"] = [TaskFactory.create(id="s", name="Outline")]
        mock_api.comments["a"] = [{"id": 1, "comment_text": "On it", "user": {"username": "bo"}}]

        out = await server.clickup_get_task_detail(TaskDetailInput(task_id="a", team_id="1"), ctx)

        assert "### Subtasks (1)" in out
        assert "Outline" in out
        assert "### Comments (1)" in out
        assert "**bo**: On it" in out

    async def test_authentication_error(self, ctx, mock_api: MockClickUpAPI):
        """Test auth failures produce a credential hint."""
        mock_api.should_fail["get_user"] = ClickUpAuthenticationError("Access token rejected", status_code=401)

        out = await server.clickup_get_user_info(FormatOnlyInput(), ctx)

        assert "Authentication failed" in out
        assert "CLICKUP_ACCESS_TOKEN" in out


# =============================================================================
# Inputs & Errors
# =============================================================================


class TestInputsAndErrors:
    """Tests for input validation and error rendering."""

    def test_unknown_priority(self):
        """Test advanced search rejects unknown priorities."""
        with pytest.raises(ValidationError):
            AdvancedSearchInput(priorities=["asap"])

    def test_blank_search_term(self):
        """Test keyword search rejects blank terms."""
        with pytest.raises(ValidationError):
            SearchInput(search_term="   ")

    def test_extra_fields_forbidden(self):
        """Test unknown tool arguments are rejected."""
        with pytest.raises(ValidationError):
            MyTasksInput(assignee="me")

    def test_handle_aggregation_error(self):
        """Test aggregation errors name the failed operation."""
        out = server.handle_error(AggregationError("get_my_tasks", RuntimeError("boom")), "get_my_tasks")

        assert out.startswith("❌ Error: get_my_tasks failed: boom")

    def test_handle_unexpected_error(self):
        """Test unknown errors name the tool."""
        out = server.handle_error(RuntimeError("kaput"), "get_task")

        assert out == "❌ Error: Unexpected error in get_task: kaput"
