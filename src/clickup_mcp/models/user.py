"""User model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator


class User(BaseModel):
    """The ClickUp user an access token belongs to."""

    id: str
    username: str | None = None
    email: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        """Build from a ``GET /user`` response (``{"user": {...}}``) or the bare user."""
        user = data.get("user", data)
        return cls(id=user["id"], username=user.get("username"), email=user.get("email"))
