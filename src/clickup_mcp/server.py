#!/usr/bin/env python3
"""
ClickUp MCP Server.

This server exposes ClickUp workspaces, lists and tasks to MCP clients.

Features:
    - User and workspace information
    - Full list hierarchy across workspaces (space and folder lists)
    - Tasks assigned to me, keyword search, advanced filtered search
    - Task detail with comments and subtasks, task update and assignment

Environment Variables:
    CLICKUP_ACCESS_TOKEN      OAuth access token used for API calls
    CLICKUP_COOKIE_SECRET     Secret signing the approved-clients cookie
    CLICKUP_MAX_CONCURRENCY   Bound on parallel upstream calls (default 4)
    CLICKUP_DISPLAY_TIMEZONE  Timezone for readable dates (default Asia/Tokyo)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from mcp.server.fastmcp import FastMCP, Context

from clickup_mcp.client import ClickUpClient
from clickup_mcp.exceptions import AggregationError
from clickup_mcp.tools.inputs import (
    ResponseFormat,
    FormatOnlyInput,
    AllListsInput,
    SpaceStatusesInput,
    CustomFieldsInput,
    MyTasksInput,
    SearchInput,
    AdvancedSearchInput,
    TaskGetInput,
    TaskDetailInput,
    TaskUpdateInput,
    TaskAssignInput,
)
from clickup_mcp.tools.formatting import (
    to_json,
    success_message,
    error_message,
    format_user_markdown,
    format_workspaces_markdown,
    format_list_tree_markdown,
    format_statuses_markdown,
    format_custom_fields_markdown,
    format_task_markdown,
    format_task_search_markdown,
    format_task_detail_markdown,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(mcp: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """
    Manage the ClickUp client lifecycle.

    Creates the client on startup and closes it on shutdown.
    """
    logger.info("Initializing ClickUp MCP Server...")

    client = ClickUpClient.from_settings()
    try:
        await client.connect()
        logger.info("ClickUp client connected")
        yield {"client": client}
    finally:
        await client.disconnect()
        logger.info("ClickUp client disconnected")


# Initialize FastMCP server
mcp = FastMCP(
    "clickup_mcp",
    lifespan=lifespan,
)


def get_client(ctx: Context) -> ClickUpClient:
    """Get the ClickUp client from context."""
    return ctx.request_context.lifespan_context["client"]


# =============================================================================
# Error Handling
# =============================================================================


def handle_error(e: Exception, operation: str) -> str:
    """Handle exceptions and return user-friendly error messages."""
    logger.exception("Error in %s: %s", operation, e)

    error_type = type(e).__name__

    if isinstance(e, AggregationError):
        return error_message(
            f"{e.operation} failed: {e.cause}",
            "The workspace list or user identity could not be fetched; no partial result is available.",
        )
    elif "Authentication" in error_type:
        return error_message(
            "Authentication failed. Please check your credentials.",
            "Ensure CLICKUP_ACCESS_TOKEN is valid or re-run the OAuth authorization.",
        )
    elif "NotFound" in error_type:
        return error_message(
            f"Resource not found: {e}",
            "Verify the ID is correct and visible to this token.",
        )
    elif "RateLimit" in error_type:
        return error_message(f"Rate limited by ClickUp: {e}", "Wait a minute and try again.")
    elif "Validation" in error_type:
        return error_message(f"Invalid input: {e}")
    elif "Configuration" in error_type:
        return error_message(
            f"Configuration error: {e}",
            "Check your environment variables and settings.",
        )
    else:
        return error_message(f"Unexpected error in {operation}: {e}")


# =============================================================================
# User & Workspace Tools
# =============================================================================


@mcp.tool(
    name="clickup_get_user_info",
    annotations={
        "title": "Get User Info",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_get_user_info(params: FormatOnlyInput, ctx: Context) -> str:
    """
    Get the ClickUp user behind the current access token.

    Returns:
        User id, username and email.
    """
    try:
        user = await get_client(ctx).get_user_info()
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_user_markdown(user)
        return to_json({"success": True, "user": user})
    except Exception as e:
        return handle_error(e, "get_user_info")


@mcp.tool(
    name="clickup_list_workspaces",
    annotations={
        "title": "List Workspaces",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_list_workspaces(params: FormatOnlyInput, ctx: Context) -> str:
    """
    List the workspaces (teams) visible to the current access token.

    Use the returned IDs as ``team_id`` for the other tools.
    """
    try:
        workspaces = await get_client(ctx).list_workspaces()
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_workspaces_markdown(workspaces)
        return to_json({"success": True, "workspaces": workspaces})
    except Exception as e:
        return handle_error(e, "list_workspaces")


# =============================================================================
# Hierarchy Tools
# =============================================================================


@mcp.tool(
    name="clickup_get_all_lists",
    annotations={
        "title": "Get All Lists",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_get_all_lists(params: AllListsInput, ctx: Context) -> str:
    """
    Enumerate every list across workspaces, grouped by space.

    Lists directly under a space are tagged ``space``; lists inside a folder
    are tagged ``folder`` with the folder id and name. Spaces or folders that
    fail to load are skipped and reported as warnings.

    Args:
        params:
            - team_id (str): Limit to one workspace (optional)
            - archived (bool): Include archived items (optional)
    """
    try:
        tree = await get_client(ctx).get_all_lists(team_id=params.team_id, archived=params.archived)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_list_tree_markdown(tree)
        return to_json(tree)
    except Exception as e:
        return handle_error(e, "get_all_lists")


@mcp.tool(
    name="clickup_get_space_statuses",
    annotations={
        "title": "Get Space Statuses",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_get_space_statuses(params: SpaceStatusesInput, ctx: Context) -> str:
    """List the task statuses configured for a space (useful for status filters)."""
    try:
        statuses = await get_client(ctx).get_available_statuses(params.space_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_statuses_markdown(params.space_id, statuses)
        return to_json({"success": True, "space_id": params.space_id, "statuses": statuses})
    except Exception as e:
        return handle_error(e, "get_space_statuses")


@mcp.tool(
    name="clickup_get_custom_fields",
    annotations={
        "title": "Get Custom Fields",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_get_custom_fields(params: CustomFieldsInput, ctx: Context) -> str:
    """List custom field definitions of a list (ids usable in advanced search)."""
    try:
        fields = await get_client(ctx).get_custom_fields(params.list_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_custom_fields_markdown(params.list_id, fields)
        return to_json({"success": True, "list_id": params.list_id, "fields": fields})
    except Exception as e:
        return handle_error(e, "get_custom_fields")


# =============================================================================
# Task Search Tools
# =============================================================================


@mcp.tool(
    name="clickup_get_my_tasks",
    annotations={
        "title": "Get My Tasks",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_get_my_tasks(params: MyTasksInput, ctx: Context) -> str:
    """
    Get tasks assigned to the current user across one or all workspaces.

    Args:
        params:
            - team_id (str): Limit to one workspace (optional)
            - limit (int): Page size, 1-100 (default 15)
            - page (int): Page number, 0-based
            - statuses (list): Status names to include (optional)
            - include_subtasks (bool), include_closed (bool)
    """
    try:
        result = await get_client(ctx).get_my_tasks(
            team_id=params.team_id,
            limit=params.limit,
            page=params.page,
            statuses=params.statuses,
            include_subtasks=params.include_subtasks,
            include_closed=params.include_closed,
        )
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_task_search_markdown("My Tasks", result)
        return to_json(result)
    except Exception as e:
        return handle_error(e, "get_my_tasks")


@mcp.tool(
    name="clickup_search_tasks",
    annotations={
        "title": "Search Tasks",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_search_tasks(params: SearchInput, ctx: Context) -> str:
    """
    Search tasks by keyword across one or all workspaces.

    Closed tasks are always included.

    Examples:
        - search_term="invoice"
        - search_term="release", team_id="9012345"
    """
    try:
        result = await get_client(ctx).search_tasks(
            params.search_term,
            team_id=params.team_id,
            limit=params.limit,
            page=params.page,
        )
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_task_search_markdown(f"Search: {params.search_term}", result)
        return to_json(result)
    except Exception as e:
        return handle_error(e, "search_tasks")


@mcp.tool(
    name="clickup_search_tasks_advanced",
    annotations={
        "title": "Advanced Task Search",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_search_tasks_advanced(params: AdvancedSearchInput, ctx: Context) -> str:
    """
    Search tasks with combined filters.

    Statuses, priorities, assignees, creators, tags, parent task and date
    ranges are filtered by ClickUp. Custom field constraints are checked
    after the page is fetched, so a page may hold fewer tasks than ``limit``.

    Examples:
        - priorities=["urgent", "high"], include_closed=False
        - due_date_from=1735689600000, due_date_to=1738367999000
        - custom_fields={"<field id>": {"min": 10, "max": 20}}
    """
    try:
        result = await get_client(ctx).search_tasks_advanced(params.to_filter())
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_task_search_markdown("Advanced Search", result)
        return to_json(result)
    except Exception as e:
        return handle_error(e, "search_tasks_advanced")


# =============================================================================
# Task Tools
# =============================================================================


@mcp.tool(
    name="clickup_get_task",
    annotations={
        "title": "Get Task",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_get_task(params: TaskGetInput, ctx: Context) -> str:
    """Get a task by its ID."""
    try:
        task = await get_client(ctx).get_task(params.task_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_task_markdown(task)
        return to_json({"success": True, "task": task})
    except Exception as e:
        return handle_error(e, "get_task")


@mcp.tool(
    name="clickup_get_task_detail",
    annotations={
        "title": "Get Task Detail",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_get_task_detail(params: TaskDetailInput, ctx: Context) -> str:
    """
    Get a task together with its comments and subtasks.

    Comments and subtasks are loaded in parallel; if either cannot be loaded
    it is shown as empty.
    """
    try:
        detail = await get_client(ctx).get_task_detail(params.task_id, params.team_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_task_detail_markdown(detail)
        return to_json({"success": True, **detail})
    except Exception as e:
        return handle_error(e, "get_task_detail")


@mcp.tool(
    name="clickup_update_task",
    annotations={
        "title": "Update Task",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_update_task(params: TaskUpdateInput, ctx: Context) -> str:
    """Update a task's name, description or status."""
    try:
        task = await get_client(ctx).update_task(
            params.task_id,
            name=params.name,
            description=params.description,
            status=params.status,
        )
        if params.response_format == ResponseFormat.MARKDOWN:
            return f"{success_message('Task updated')}\n\n{format_task_markdown(task)}"
        return to_json({"success": True, "task": task})
    except Exception as e:
        return handle_error(e, "update_task")


@mcp.tool(
    name="clickup_assign_task",
    annotations={
        "title": "Assign Task",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def clickup_assign_task(params: TaskAssignInput, ctx: Context) -> str:
    """Add (and optionally remove) assignees on a task."""
    try:
        task = await get_client(ctx).assign_task(
            params.task_id,
            params.assignee_ids,
            params.remove_assignee_ids,
        )
        if params.response_format == ResponseFormat.MARKDOWN:
            return f"{success_message('Assignees updated')}\n\n{format_task_markdown(task)}"
        return to_json({"success": True, "task": task})
    except Exception as e:
        return handle_error(e, "assign_task")


# =============================================================================
# Main Entry Point
# =============================================================================


def main():
    """Main entry point for the ClickUp MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
