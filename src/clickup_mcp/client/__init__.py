"""High-level ClickUp client used by the MCP tools."""

from clickup_mcp.client.client import ClickUpClient

__all__ = ["ClickUpClient"]
