"""
ClickUp MCP Server - workspace aggregation and task search for ClickUp.

This package provides a Model Context Protocol (MCP) server for ClickUp,
guarded by an OAuth consent flow whose approvals are remembered in a
signed cookie.

Architecture:
    MCP Tools Layer
         │
         ▼
    ClickUp Client (facade)
         │
    ┌────┴──────────────┐
    ▼                   ▼
  Tree Walker      Task Aggregator ── Filter Compiler
    │                   │
    └────────┬──────────┘
             ▼
       ClickUp REST API

    Consent Store (signed cookie) runs in the authorization path.
"""

__version__ = "0.1.0"
__author__ = "ClickUp MCP Contributors"

from clickup_mcp.exceptions import (
    ClickUpError,
    ClickUpAuthenticationError,
    ClickUpAPIError,
    ClickUpValidationError,
    ClickUpRateLimitError,
    ClickUpNotFoundError,
    ClickUpConfigurationError,
    ConsentError,
    AggregationError,
)

__all__ = [
    "__version__",
    "ClickUpError",
    "ClickUpAuthenticationError",
    "ClickUpAPIError",
    "ClickUpValidationError",
    "ClickUpRateLimitError",
    "ClickUpNotFoundError",
    "ClickUpConfigurationError",
    "ConsentError",
    "AggregationError",
]
