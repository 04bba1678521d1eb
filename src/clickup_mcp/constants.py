"""
ClickUp constants.

Priority levels, cookie parameters and the upstream endpoints used
throughout the package.
"""

from __future__ import annotations

from enum import Enum, IntEnum


DEFAULT_API_BASE_URL = "https://api.clickup.com/api/v2"
DEFAULT_AUTHORIZE_URL = "https://app.clickup.com/api"
DEFAULT_TOKEN_URL = "https://api.clickup.com/api/v2/oauth/token"

DEFAULT_PAGE_SIZE = 15
MAX_PAGE_SIZE = 100

CONSENT_COOKIE_NAME = "mcp-approved-clients"
CONSENT_COOKIE_MAX_AGE = 31536000  # one year


class TaskPriority(IntEnum):
    """ClickUp numeric priority levels (lower is more urgent)."""

    URGENT = 1
    HIGH = 2
    NORMAL = 3
    LOW = 4

    @classmethod
    def from_name(cls, name: str) -> "TaskPriority":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown priority: {name!r}") from None


PRIORITY_NAMES = [p.name.lower() for p in TaskPriority]


class ListLocation(str, Enum):
    """Where a list lives inside its space."""

    SPACE = "space"
    FOLDER = "folder"


class TaskScope(str, Enum):
    """Task aggregation modes."""

    ASSIGNED = "assigned"
    SEARCH = "search"
    ADVANCED = "advanced"
