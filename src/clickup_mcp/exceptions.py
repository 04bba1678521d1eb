"""
ClickUp MCP exception hierarchy.

Every error raised by this package derives from ClickUpError so callers can
catch one type. HTTP failures are mapped onto the narrower subclasses by
the API client.
"""

from __future__ import annotations

from typing import Any


class ClickUpError(Exception):
    """Base exception for all ClickUp MCP errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ClickUpAPIError(ClickUpError):
    """Upstream API returned an unexpected response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        operation: str | None = None,
        response_text: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
        self.status_code = status_code
        self.operation = operation
        self.response_text = response_text


class ClickUpAuthenticationError(ClickUpAPIError):
    """The access token was rejected or could not be obtained."""


class ClickUpNotFoundError(ClickUpAPIError):
    """Requested resource does not exist or is not visible to the token."""


class ClickUpRateLimitError(ClickUpAPIError):
    """Upstream rate limit hit (HTTP 429)."""


class ClickUpValidationError(ClickUpError):
    """Caller supplied invalid input."""


class ClickUpConfigurationError(ClickUpError):
    """Missing or invalid configuration (secrets, credentials)."""


class ConsentError(ClickUpError):
    """The approval form submission could not be trusted.

    Raised only on the POST path; cookie verification never raises.
    """


class AggregationError(ClickUpError):
    """Root-level fetch failed, so no partial result can be produced."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}", {"operation": operation})
        self.operation = operation
        self.cause = cause
