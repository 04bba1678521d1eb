"""
Workspace tree walker.

Enumerates every list reachable from the in-scope workspaces, grouped by
space and tagged with whether it sits directly in the space or in a folder.
"""

from __future__ import annotations

import asyncio
import logging

from clickup_mcp.aggregation.base import FanOut, resolve_workspaces
from clickup_mcp.api import ClickUpAPI
from clickup_mcp.exceptions import AggregationError
from clickup_mcp.models import (
    AggregatedListEntry,
    Folder,
    ListTree,
    Space,
    SpaceLists,
    Workspace,
)

logger = logging.getLogger(__name__)


class TreeWalker:
    """
    Depth-first fan-out over workspace → space → folder → list.

    Failure policy:
        - workspace enumeration fails: AggregationError
        - a workspace's spaces cannot be fetched: that workspace yields nothing
        - a space's lists or folders cannot be fetched: the space yields an
          empty group
        - a folder's lists cannot be fetched: that folder yields nothing
    """

    def __init__(self, api: ClickUpAPI, max_concurrency: int = 4) -> None:
        self.api = api
        self.max_concurrency = max_concurrency

    async def walk(
        self,
        access_token: str,
        team_id: str | None = None,
        archived: bool | None = None,
    ) -> ListTree:
        try:
            workspaces = await resolve_workspaces(self.api, access_token, team_id)
        except Exception as e:
            raise AggregationError("get_all_lists", e) from e

        fanout = FanOut(self.max_concurrency)
        per_workspace = await asyncio.gather(
            *(self._walk_workspace(fanout, access_token, ws, archived) for ws in workspaces)
        )

        groups = [group for groups in per_workspace for group in groups]
        total = sum(len(group.lists) for group in groups)
        logger.info(
            "Walked %d workspace(s): %d space(s), %d list(s), %d warning(s)",
            len(workspaces), len(groups), total, len(fanout.warnings),
        )
        return ListTree(
            success=True,
            data=groups,
            total_lists=total,
            partial=bool(fanout.warnings),
            warnings=fanout.warnings,
        )

    async def _walk_workspace(
        self,
        fanout: FanOut,
        access_token: str,
        workspace: Workspace,
        archived: bool | None,
    ) -> list[SpaceLists]:
        try:
            spaces = await fanout.call(self.api.get_spaces, access_token, workspace.id, archived)
        except Exception as e:
            fanout.warn(f"Workspace {workspace.id} skipped", e)
            return []

        return list(
            await asyncio.gather(
                *(self._walk_space(fanout, access_token, workspace, space, archived) for space in spaces)
            )
        )

    async def _walk_space(
        self,
        fanout: FanOut,
        access_token: str,
        workspace: Workspace,
        space: Space,
        archived: bool | None,
    ) -> SpaceLists:
        group = SpaceLists(
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            space_id=space.id,
            space_name=space.name,
        )

        space_lists, folders = await asyncio.gather(
            fanout.call(self.api.get_lists_in_space, access_token, space.id, archived),
            fanout.call(self.api.get_folders, access_token, space.id, archived),
            return_exceptions=True,
        )
        for result in (space_lists, folders):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                fanout.warn(f"Space {space.id} skipped", result)
                return group

        group.lists.extend(AggregatedListEntry.in_space(lst, workspace, space) for lst in space_lists)

        folder_entries = await asyncio.gather(
            *(
                self._walk_folder(fanout, access_token, workspace, space, folder, archived)
                for folder in folders
            )
        )
        for entries in folder_entries:
            group.lists.extend(entries)
        return group

    async def _walk_folder(
        self,
        fanout: FanOut,
        access_token: str,
        workspace: Workspace,
        space: Space,
        folder: Folder,
        archived: bool | None,
    ) -> list[AggregatedListEntry]:
        try:
            lists = await fanout.call(self.api.get_lists_in_folder, access_token, folder.id, archived)
        except Exception as e:
            fanout.warn(f"Folder {folder.id} skipped", e)
            return []
        return [AggregatedListEntry.in_folder(lst, workspace, space, folder) for lst in lists]
