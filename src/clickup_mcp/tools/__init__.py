"""
ClickUp MCP Tools Package.

Input models and response formatting for the MCP tools:
    - User & workspace tools
    - Hierarchy tools (all lists, space statuses, custom fields)
    - Task search tools (assigned to me, keyword, advanced)
    - Task tools (get, detail, update, assign)
"""

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

__all__ = [
    "ResponseFormat",
    "FormatOnlyInput",
    "AllListsInput",
    "SpaceStatusesInput",
    "CustomFieldsInput",
    "MyTasksInput",
    "SearchInput",
    "AdvancedSearchInput",
    "TaskGetInput",
    "TaskDetailInput",
    "TaskUpdateInput",
    "TaskAssignInput",
]
