"""
ClickUp REST API (v2) access.

ClickUpAPI is a thin async wrapper over httpx: one method per endpoint,
Bearer authentication per call, HTTP errors mapped onto the package
exception hierarchy. It performs no retries.
"""

from clickup_mcp.api.client import ClickUpAPI, QueryParams

__all__ = ["ClickUpAPI", "QueryParams"]
