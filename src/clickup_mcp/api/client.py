"""
ClickUp API v2 client.

Every method takes the caller's access token explicitly: one client instance
can serve many OAuth users, and it holds no per-user state.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Sequence, TypeVar

import httpx

from clickup_mcp.constants import DEFAULT_API_BASE_URL
from clickup_mcp.exceptions import (
    ClickUpAPIError,
    ClickUpAuthenticationError,
    ClickUpNotFoundError,
    ClickUpRateLimitError,
)
from clickup_mcp.models import (
    CustomFieldDefinition,
    Folder,
    Space,
    SpaceStatus,
    TaskList,
    TaskPage,
    User,
    Workspace,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ClickUpAPI")

# Ordered (name, value) pairs; repeated names encode multi-valued filters.
QueryParams = Sequence[tuple[str, str]]


def _archived_params(archived: bool | None) -> dict[str, str]:
    return {} if archived is None else {"archived": str(archived).lower()}


class ClickUpAPI:
    """
    Async client for the ClickUp v2 REST API.

    Usage:
        async with ClickUpAPI() as api:
            user = await api.get_user(token)
            workspaces = await api.get_workspaces(token)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self: T) -> T:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        access_token: str,
        *,
        operation: str,
        params: QueryParams | dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise ClickUpAPIError(f"Request failed: {e}", operation=operation) from e

        if response.is_error:
            self._raise_for_status(response, operation)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise ClickUpAPIError(
                "Response is not valid JSON",
                status_code=response.status_code,
                operation=operation,
            ) from e
        if not isinstance(data, dict):
            raise ClickUpAPIError(
                "Unexpected response shape",
                status_code=response.status_code,
                operation=operation,
            )
        return data

    @staticmethod
    def _raise_for_status(response: httpx.Response, operation: str) -> None:
        status = response.status_code
        text = response.text
        kwargs = {"status_code": status, "operation": operation, "response_text": text}

        if status == 401:
            raise ClickUpAuthenticationError("Access token rejected", **kwargs)
        if status == 404:
            raise ClickUpNotFoundError("Resource not found", **kwargs)
        if status == 429:
            raise ClickUpRateLimitError("Rate limit exceeded", **kwargs)
        raise ClickUpAPIError(f"ClickUp API error: {status}", **kwargs)

    # =========================================================================
    # User & Workspaces
    # =========================================================================

    async def get_user(self, access_token: str) -> User:
        data = await self._request("GET", "/user", access_token, operation="get_user")
        return User.from_api(data)

    async def get_workspaces(self, access_token: str) -> list[Workspace]:
        data = await self._request("GET", "/team", access_token, operation="get_workspaces")
        return [Workspace.from_api(t) for t in data.get("teams") or []]

    # =========================================================================
    # Hierarchy
    # =========================================================================

    async def get_spaces(
        self, access_token: str, team_id: str, archived: bool | None = None
    ) -> list[Space]:
        data = await self._request(
            "GET",
            f"/team/{team_id}/space",
            access_token,
            operation="get_spaces",
            params=_archived_params(archived),
        )
        return [Space.from_api(s, workspace_id=team_id) for s in data.get("spaces") or []]

    async def get_folders(
        self, access_token: str, space_id: str, archived: bool | None = None
    ) -> list[Folder]:
        data = await self._request(
            "GET",
            f"/space/{space_id}/folder",
            access_token,
            operation="get_folders",
            params=_archived_params(archived),
        )
        return [Folder.from_api(f, space_id=space_id) for f in data.get("folders") or []]

    async def get_lists_in_space(
        self, access_token: str, space_id: str, archived: bool | None = None
    ) -> list[TaskList]:
        """Lists sitting directly under a space (folderless)."""
        data = await self._request(
            "GET",
            f"/space/{space_id}/list",
            access_token,
            operation="get_lists_in_space",
            params=_archived_params(archived),
        )
        return [TaskList.from_api(item, space_id=space_id) for item in data.get("lists") or []]

    async def get_lists_in_folder(
        self, access_token: str, folder_id: str, archived: bool | None = None
    ) -> list[TaskList]:
        data = await self._request(
            "GET",
            f"/folder/{folder_id}/list",
            access_token,
            operation="get_lists_in_folder",
            params=_archived_params(archived),
        )
        return [TaskList.from_api(item, folder_id=folder_id) for item in data.get("lists") or []]

    async def get_space_statuses(self, access_token: str, space_id: str) -> list[SpaceStatus]:
        data = await self._request("GET", f"/space/{space_id}", access_token, operation="get_space_statuses")
        return [SpaceStatus.from_api(s) for s in data.get("statuses") or []]

    async def get_list_custom_fields(
        self, access_token: str, list_id: str
    ) -> list[CustomFieldDefinition]:
        data = await self._request("GET", f"/list/{list_id}/field", access_token, operation="get_custom_fields")
        return [CustomFieldDefinition.from_api(f) for f in data.get("fields") or []]

    # =========================================================================
    # Tasks
    # =========================================================================

    async def get_team_tasks(
        self, access_token: str, team_id: str, params: QueryParams
    ) -> TaskPage:
        """One page of the filtered team task query."""
        data = await self._request(
            "GET",
            f"/team/{team_id}/task",
            access_token,
            operation="get_team_tasks",
            params=list(params),
        )
        return TaskPage.from_api(data)

    async def get_task(self, access_token: str, task_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/task/{task_id}", access_token, operation="get_task")

    async def get_task_comments(self, access_token: str, task_id: str) -> list[dict[str, Any]]:
        data = await self._request(
            "GET", f"/task/{task_id}/comment", access_token, operation="get_task_comments"
        )
        return data.get("comments") or []

    async def get_subtasks(
        self, access_token: str, task_id: str, team_id: str
    ) -> list[dict[str, Any]]:
        page = await self.get_team_tasks(
            access_token, team_id, [("parent", task_id), ("subtasks", "true")]
        )
        return page.tasks

    async def update_task(
        self, access_token: str, task_id: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "PUT", f"/task/{task_id}", access_token, operation="update_task", json=payload
        )
