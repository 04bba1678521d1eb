"""
Cross-workspace task aggregation.

Three query modes share one engine: the workspace set is resolved, each
workspace's page is fetched independently, and the pages are merged into a
single logical page. A workspace that fails contributes no tasks.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo
from typing import Any, Optional

from pydantic import BaseModel, Field

from clickup_mcp.aggregation.base import FanOut, resolve_workspaces
from clickup_mcp.aggregation.filters import CompiledFilter, SearchFilter, compile_filter
from clickup_mcp.api import ClickUpAPI
from clickup_mcp.constants import DEFAULT_PAGE_SIZE, TaskScope
from clickup_mcp.exceptions import AggregationError
from clickup_mcp.models import TaskPage, TaskRecord, Workspace

logger = logging.getLogger(__name__)


class Pagination(BaseModel):
    limit: int
    page: int
    has_more: bool
    next_page: int


class TaskSearchResult(BaseModel):
    """Merged page of tasks across workspaces."""

    success: bool = True
    scope: TaskScope
    tasks: list[TaskRecord] = Field(default_factory=list)
    total_tasks: int = 0
    pagination: Pagination
    user_id: Optional[str] = None
    search_term: Optional[str] = None
    filters: Optional[dict[str, Any]] = None
    partial: bool = False
    warnings: list[str] = Field(default_factory=list)


class _WorkspacePage(BaseModel):
    tasks: list[TaskRecord]
    last_page: Optional[bool] = None


def has_more_pages(pages: list[_WorkspacePage], limit: int) -> bool:
    """Whether any workspace has results beyond this page.

    The upstream ``last_page`` flag wins; a page without it is assumed to
    continue when it came back full.
    """
    for page in pages:
        if page.last_page is not None:
            if not page.last_page:
                return True
        elif len(page.tasks) == limit:
            return True
    return False


class TaskAggregator:
    """
    Fetches tasks across one or all workspaces.

    Modes:
        - get_my_tasks: tasks assigned to the token's own user
        - search_tasks: keyword search, closed tasks included
        - search_tasks_advanced: compiled SearchFilter plus custom-field post-filter
    """

    def __init__(
        self,
        api: ClickUpAPI,
        max_concurrency: int = 4,
        tz: tzinfo | None = None,
    ) -> None:
        self.api = api
        self.max_concurrency = max_concurrency
        self.tz = tz

    # =========================================================================
    # Query Modes
    # =========================================================================

    async def get_my_tasks(
        self,
        access_token: str,
        team_id: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        page: int = 0,
        *,
        statuses: list[str] | None = None,
        include_subtasks: bool | None = None,
        include_closed: bool = False,
    ) -> TaskSearchResult:
        try:
            user = await self.api.get_user(access_token)
            workspaces = await resolve_workspaces(self.api, access_token, team_id)
        except Exception as e:
            raise AggregationError("get_my_tasks", e) from e

        compiled = compile_filter(
            SearchFilter(
                assignee_ids=[user.id],
                statuses=statuses,
                include_subtasks=include_subtasks,
                include_closed=include_closed,
                limit=limit,
                page=page,
            )
        )
        result = await self._aggregate(access_token, workspaces, compiled, limit, page, TaskScope.ASSIGNED)
        result.user_id = user.id
        return result

    async def search_tasks(
        self,
        access_token: str,
        search_term: str,
        team_id: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        page: int = 0,
    ) -> TaskSearchResult:
        try:
            workspaces = await resolve_workspaces(self.api, access_token, team_id)
        except Exception as e:
            raise AggregationError("search_tasks", e) from e

        compiled = compile_filter(
            SearchFilter(search_term=search_term, include_closed=True, limit=limit, page=page)
        )
        result = await self._aggregate(access_token, workspaces, compiled, limit, page, TaskScope.SEARCH)
        result.search_term = search_term
        return result

    async def search_tasks_advanced(
        self, access_token: str, search_filter: SearchFilter
    ) -> TaskSearchResult:
        try:
            workspaces = await resolve_workspaces(self.api, access_token, search_filter.team_id)
        except Exception as e:
            raise AggregationError("search_tasks_advanced", e) from e

        compiled = compile_filter(search_filter)
        result = await self._aggregate(
            access_token,
            workspaces,
            compiled,
            search_filter.limit,
            search_filter.page,
            TaskScope.ADVANCED,
        )
        result.filters = search_filter.model_dump(by_alias=True, exclude_none=True)
        return result

    # =========================================================================
    # Merge
    # =========================================================================

    async def _aggregate(
        self,
        access_token: str,
        workspaces: list[Workspace],
        compiled: CompiledFilter,
        limit: int,
        page: int,
        scope: TaskScope,
    ) -> TaskSearchResult:
        fanout = FanOut(self.max_concurrency)
        fetched = await asyncio.gather(
            *(self._fetch_workspace(fanout, access_token, ws, compiled) for ws in workspaces)
        )
        pages = [p for p in fetched if p is not None]

        merged = [task for p in pages for task in p.tasks]
        tasks = compiled.apply(merged)

        logger.info(
            "%s: %d task(s) from %d/%d workspace(s), %d after local filtering",
            scope.value, len(merged), len(pages), len(workspaces), len(tasks),
        )
        return TaskSearchResult(
            scope=scope,
            tasks=tasks,
            total_tasks=len(tasks),
            pagination=Pagination(
                limit=limit,
                page=page,
                has_more=has_more_pages(pages, limit),
                next_page=page + 1,
            ),
            partial=bool(fanout.warnings),
            warnings=fanout.warnings,
        )

    async def _fetch_workspace(
        self,
        fanout: FanOut,
        access_token: str,
        workspace: Workspace,
        compiled: CompiledFilter,
    ) -> _WorkspacePage | None:
        try:
            page: TaskPage = await fanout.call(
                self.api.get_team_tasks, access_token, workspace.id, compiled.params
            )
        except Exception as e:
            fanout.warn(f"Tasks for workspace {workspace.id} skipped", e)
            return None

        tasks: list[TaskRecord] = []
        for raw in page.tasks:
            try:
                task = TaskRecord.from_api(raw, self.tz)
            except Exception as e:
                fanout.warn(f"Task {raw.get('id')} in workspace {workspace.id} skipped", e)
                continue
            tasks.append(task.with_workspace(workspace.id, workspace.name))
        return _WorkspacePage(tasks=tasks, last_page=page.last_page)
