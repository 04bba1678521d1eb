"""
Upstream OAuth helpers for ClickUp.

Builds the ClickUp authorize redirect and exchanges the returned
authorization code for an access token.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

import httpx

from clickup_mcp.exceptions import ClickUpAuthenticationError, ClickUpValidationError

logger = logging.getLogger(__name__)


def build_authorize_url(
    upstream_url: str,
    client_id: str,
    redirect_uri: str,
    *,
    state: str | None = None,
    scope: str | None = None,
    response_type: str = "code",
) -> str:
    """Construct the upstream authorization URL."""
    params: dict[str, str] = {"client_id": client_id, "redirect_uri": redirect_uri}
    if scope:
        params["scope"] = scope
    if state:
        params["state"] = state
    params["response_type"] = response_type or "code"
    return str(httpx.URL(upstream_url).copy_merge_params(params))


async def exchange_code(
    code: str | None,
    *,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    token_url: str,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> str:
    """
    Exchange an authorization code for an access token.

    The token endpoint may answer with JSON or a form-encoded body.

    Returns:
        The access token.

    Raises:
        ClickUpValidationError: No code was supplied.
        ClickUpAuthenticationError: The exchange failed or returned no token.
    """
    if not code:
        raise ClickUpValidationError("Missing authorization code")

    form = {
        "client_id": client_id,
        "client_secret": client_secret,
        "code": code,
        "redirect_uri": redirect_uri,
    }

    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=timeout)
    try:
        response = await client.post(token_url, data=form)
    except httpx.HTTPError as e:
        raise ClickUpAuthenticationError(
            f"Failed to fetch access token: {e}", operation="exchange_code"
        ) from e
    finally:
        if owns_client:
            await client.aclose()

    if response.is_error:
        logger.error("Token exchange failed: %s %s", response.status_code, response.text)
        raise ClickUpAuthenticationError(
            "Failed to fetch access token",
            status_code=response.status_code,
            operation="exchange_code",
            response_text=response.text,
        )

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            data = response.json()
        except ValueError:
            data = None
        access_token = data.get("access_token") if isinstance(data, dict) else None
    else:
        access_token = next(iter(parse_qs(response.text).get("access_token", [])), None)

    if not access_token:
        raise ClickUpAuthenticationError("Missing access token", operation="exchange_code")
    return access_token
