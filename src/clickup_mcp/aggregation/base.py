"""Shared pieces of the tree walker and task aggregator."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from clickup_mcp.api import ClickUpAPI
from clickup_mcp.models import Workspace

logger = logging.getLogger(__name__)

R = TypeVar("R")


class FanOut:
    """Bounds the number of in-flight upstream calls for one aggregation.

    Only leaf calls go through ``call``; branches never hold a slot while
    waiting on their children, so nesting cannot deadlock.
    """

    def __init__(self, max_concurrency: int) -> None:
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self.warnings: list[str] = []

    async def call(self, fn: Callable[..., Awaitable[R]], *args: Any, **kwargs: Any) -> R:
        async with self._semaphore:
            return await fn(*args, **kwargs)

    def warn(self, message: str, error: BaseException) -> None:
        logger.warning("%s: %s", message, error)
        self.warnings.append(f"{message}: {error}")


async def resolve_workspaces(
    api: ClickUpAPI, access_token: str, team_id: str | None = None
) -> list[Workspace]:
    """Workspaces in scope: one named team, or every team the token sees.

    A named team the token cannot list is replaced by a placeholder rather
    than rejected. Failures propagate; there is nothing to iterate without
    this list.
    """
    workspaces = await api.get_workspaces(access_token)
    if not team_id:
        return workspaces
    for workspace in workspaces:
        if workspace.id == team_id:
            return [workspace]
    return [Workspace.placeholder(team_id)]
