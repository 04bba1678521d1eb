"""
ClickUp Client.

ClickUpClient is the single object the MCP tools talk to. It owns the
ClickUpAPI transport and wires the tree walker, task aggregator and consent
store together from settings.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any, TypeVar

from clickup_mcp.aggregation import SearchFilter, TaskAggregator, TaskSearchResult, TreeWalker
from clickup_mcp.api import ClickUpAPI
from clickup_mcp.auth import SignedConsentStore, build_authorize_url, exchange_code
from clickup_mcp.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_AUTHORIZE_URL,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TOKEN_URL,
)
from clickup_mcp.exceptions import ClickUpConfigurationError, ClickUpValidationError
from clickup_mcp.models import (
    Comment,
    CustomFieldDefinition,
    ListTree,
    SpaceStatus,
    TaskRecord,
    User,
    Workspace,
)
from clickup_mcp.models.task import resolve_timezone
from clickup_mcp.settings import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ClickUpClient")


class ClickUpClient:
    """
    Facade over the ClickUp API and the aggregation engine.

    Every operation takes an optional ``access_token``; when omitted the
    token configured at construction is used.

    Usage:
        async with ClickUpClient.from_settings() as client:
            tree = await client.get_all_lists()
            mine = await client.get_my_tasks(limit=20)
    """

    def __init__(
        self,
        access_token: str | None = None,
        *,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        max_concurrency: int = 4,
        display_timezone: str | None = None,
        cookie_secret: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        authorize_url: str = DEFAULT_AUTHORIZE_URL,
        token_url: str = DEFAULT_TOKEN_URL,
    ) -> None:
        self._access_token = access_token
        self._api_base_url = api_base_url
        self._timeout = timeout
        self._max_concurrency = max_concurrency
        self._tz = resolve_timezone(display_timezone)
        self._cookie_secret = cookie_secret
        self._client_id = client_id
        self._client_secret = client_secret
        self._authorize_url = authorize_url
        self._token_url = token_url

        self._api: ClickUpAPI | None = None

    @classmethod
    def from_settings(cls: type[T], settings: Settings | None = None) -> T:
        settings = settings or get_settings()
        return cls(
            access_token=settings.access_token or None,
            api_base_url=settings.api_base_url,
            timeout=settings.timeout,
            max_concurrency=settings.max_concurrency,
            display_timezone=settings.display_timezone,
            cookie_secret=settings.cookie_secret or None,
            client_id=settings.client_id or None,
            client_secret=settings.client_secret or None,
            authorize_url=settings.authorize_url,
            token_url=settings.token_url,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self) -> None:
        if self._api is None:
            self._api = ClickUpAPI(base_url=self._api_base_url, timeout=self._timeout)
            logger.info("ClickUp API client created for %s", self._api_base_url)

    async def disconnect(self) -> None:
        if self._api is not None:
            await self._api.close()
            self._api = None

    async def __aenter__(self: T) -> T:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.disconnect()

    @property
    def api(self) -> ClickUpAPI:
        if self._api is None:
            raise ClickUpConfigurationError(
                "Client not connected. Use 'await client.connect()' or async context manager."
            )
        return self._api

    @property
    def tree_walker(self) -> TreeWalker:
        return TreeWalker(self.api, max_concurrency=self._max_concurrency)

    @property
    def task_aggregator(self) -> TaskAggregator:
        return TaskAggregator(self.api, max_concurrency=self._max_concurrency, tz=self._tz)

    @property
    def consent_store(self) -> SignedConsentStore:
        if not self._cookie_secret:
            raise ClickUpConfigurationError("CLICKUP_COOKIE_SECRET is not set")
        return SignedConsentStore(self._cookie_secret)

    def _token(self, access_token: str | None) -> str:
        token = access_token or self._access_token
        if not token:
            raise ClickUpConfigurationError(
                "No access token available. Set CLICKUP_ACCESS_TOKEN or complete the OAuth flow."
            )
        return token

    # =========================================================================
    # OAuth
    # =========================================================================

    def _oauth_app(self) -> tuple[str, str]:
        if not self._client_id or not self._client_secret:
            raise ClickUpConfigurationError("CLICKUP_CLIENT_ID and CLICKUP_CLIENT_SECRET must be set")
        return self._client_id, self._client_secret

    def authorize_url(self, redirect_uri: str, state: str | None = None) -> str:
        """URL to send the browser to once the consent page is approved."""
        client_id, _ = self._oauth_app()
        return build_authorize_url(self._authorize_url, client_id, redirect_uri, state=state)

    async def complete_authorization(self, code: str | None, redirect_uri: str) -> str:
        """Exchange the callback code and use the token for later calls."""
        client_id, client_secret = self._oauth_app()
        token = await exchange_code(
            code,
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            token_url=self._token_url,
            timeout=self._timeout,
        )
        self._access_token = token
        logger.info("OAuth authorization completed")
        return token

    # =========================================================================
    # User & Hierarchy
    # =========================================================================

    async def get_user_info(self, access_token: str | None = None) -> User:
        return await self.api.get_user(self._token(access_token))

    async def list_workspaces(self, access_token: str | None = None) -> list[Workspace]:
        return await self.api.get_workspaces(self._token(access_token))

    async def get_all_lists(
        self,
        team_id: str | None = None,
        archived: bool | None = None,
        access_token: str | None = None,
    ) -> ListTree:
        return await self.tree_walker.walk(self._token(access_token), team_id, archived)

    async def get_available_statuses(
        self, space_id: str, access_token: str | None = None
    ) -> list[SpaceStatus]:
        return await self.api.get_space_statuses(self._token(access_token), space_id)

    async def get_custom_fields(
        self, list_id: str, access_token: str | None = None
    ) -> list[CustomFieldDefinition]:
        return await self.api.get_list_custom_fields(self._token(access_token), list_id)

    # =========================================================================
    # Task Search
    # =========================================================================

    async def get_my_tasks(
        self,
        team_id: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        page: int = 0,
        *,
        statuses: list[str] | None = None,
        include_subtasks: bool | None = None,
        include_closed: bool = False,
        access_token: str | None = None,
    ) -> TaskSearchResult:
        return await self.task_aggregator.get_my_tasks(
            self._token(access_token),
            team_id,
            limit,
            page,
            statuses=statuses,
            include_subtasks=include_subtasks,
            include_closed=include_closed,
        )

    async def search_tasks(
        self,
        search_term: str,
        team_id: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        page: int = 0,
        access_token: str | None = None,
    ) -> TaskSearchResult:
        return await self.task_aggregator.search_tasks(
            self._token(access_token), search_term, team_id, limit, page
        )

    async def search_tasks_advanced(
        self, search_filter: SearchFilter, access_token: str | None = None
    ) -> TaskSearchResult:
        return await self.task_aggregator.search_tasks_advanced(self._token(access_token), search_filter)

    # =========================================================================
    # Single Task
    # =========================================================================

    async def get_task(self, task_id: str, access_token: str | None = None) -> TaskRecord:
        data = await self.api.get_task(self._token(access_token), task_id)
        return TaskRecord.from_api(data, self._tz)

    async def get_task_detail(
        self,
        task_id: str,
        team_id: str,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        """
        Get a task with its comments and subtasks.

        Comments and subtasks are fetched concurrently; either one failing
        yields an empty list for that part only.
        """
        token = self._token(access_token)
        task = await self.get_task(task_id, token)

        comments, subtasks = await asyncio.gather(
            self._safe(self.api.get_task_comments(token, task_id), "comments", task_id),
            self._safe(self.api.get_subtasks(token, task_id, team_id), "subtasks", task_id),
        )

        return {
            "task": task,
            "comments": [Comment.from_api(c, self._tz) for c in comments],
            "subtasks": [TaskRecord.from_api(s, self._tz) for s in subtasks],
            "has_subtasks": bool(subtasks),
            "comment_count": len(comments),
        }

    @staticmethod
    async def _safe(coro: Any, part: str, task_id: str) -> list[dict[str, Any]]:
        try:
            return await coro
        except Exception as e:
            logger.warning("Could not fetch %s for task %s: %s", part, task_id, e)
            return []

    async def update_task(
        self,
        task_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        status: str | None = None,
        access_token: str | None = None,
    ) -> TaskRecord:
        payload: dict[str, Any] = {}
        if name:
            payload["name"] = name
        if description:
            payload["description"] = description
        if status:
            payload["status"] = status
        if not payload:
            raise ClickUpValidationError("Nothing to update: provide name, description or status")

        data = await self.api.update_task(self._token(access_token), task_id, payload)
        return TaskRecord.from_api(data, self._tz)

    async def assign_task(
        self,
        task_id: str,
        assignee_ids: list[str],
        remove_assignee_ids: list[str] | None = None,
        access_token: str | None = None,
    ) -> TaskRecord:
        assignees: dict[str, list[int | str]] = {"add": [_user_id(a) for a in assignee_ids]}
        if remove_assignee_ids:
            assignees["rem"] = [_user_id(a) for a in remove_assignee_ids]

        data = await self.api.update_task(self._token(access_token), task_id, {"assignees": assignees})
        return TaskRecord.from_api(data, self._tz)


def _user_id(value: str) -> int | str:
    # ClickUp user ids are integers in write payloads.
    return int(value) if str(value).isdigit() else value
