"""
Signed consent cookie.

The list of OAuth client ids a browser has already approved is stored in a
single cookie, never on the server:

    mcp-approved-clients=<hex HMAC-SHA256>.<base64 JSON array>

The signature covers the UTF-8 JSON bytes, not the base64 text. Reading is
fail-closed: anything that does not verify counts as "never approved" and
never raises. Writing (the POST from the consent page) is fail-loud: a
state blob that cannot be decoded raises ConsentError.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from clickup_mcp.constants import CONSENT_COOKIE_MAX_AGE, CONSENT_COOKIE_NAME
from clickup_mcp.exceptions import ClickUpConfigurationError, ConsentError

logger = logging.getLogger(__name__)

_SIGNATURE_HEX_LENGTH = hashlib.sha256().digest_size * 2


# =============================================================================
# State Encoding
# =============================================================================


def encode_state(data: Any) -> str:
    """Encode arbitrary JSON-serializable data as base64 text."""
    try:
        payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ConsentError("Could not encode state") from e
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_state(encoded: str) -> Any:
    """Decode text produced by encode_state.

    Raises:
        ConsentError: If the text is not base64 or does not hold JSON.
    """
    try:
        raw = _b64decode(encoded)
        return json.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise ConsentError("Could not decode state") from e


def _b64decode(value: str) -> bytes:
    # Accept both the standard and the URL-safe alphabet, with or without padding.
    normalized = value.strip().replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(normalized, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64: {e}") from e


# =============================================================================
# Signing
# =============================================================================


def _key(secret: str | bytes) -> bytes:
    if not secret:
        raise ClickUpConfigurationError(
            "Cookie secret is not defined. A secret key is required for signing cookies."
        )
    return secret if isinstance(secret, bytes) else secret.encode("utf-8")


def sign_payload(payload: bytes, secret: str | bytes) -> str:
    """Return the hex HMAC-SHA256 of payload."""
    return hmac.new(_key(secret), payload, hashlib.sha256).hexdigest()


def verify_signature(signature_hex: str, payload: bytes, secret: str | bytes) -> bool:
    """Constant-time check of a hex signature; malformed hex is a mismatch."""
    if len(signature_hex) != _SIGNATURE_HEX_LENGTH:
        return False
    try:
        given = bytes.fromhex(signature_hex)
    except ValueError:
        return False
    expected = hmac.new(_key(secret), payload, hashlib.sha256).digest()
    return hmac.compare_digest(given, expected)


def serialize_clients(clients: list[str]) -> bytes:
    """Serialize a consent list exactly as it is signed."""
    return json.dumps(clients, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def encode_consent(clients: list[str], secret: str | bytes) -> str:
    """Build the cookie value ``<signature>.<base64 payload>``."""
    payload = serialize_clients(clients)
    signature = sign_payload(payload, secret)
    return f"{signature}.{base64.b64encode(payload).decode('ascii')}"


def decode_consent(cookie_value: str, secret: str | bytes) -> list[str] | None:
    """Verify and decode a cookie value.

    Returns None for any envelope that does not verify or does not hold a
    JSON array of strings.
    """
    parts = cookie_value.split(".")
    if len(parts) != 2:
        logger.warning("Invalid consent cookie format received.")
        return None

    signature_hex, encoded_payload = parts
    try:
        payload = _b64decode(encoded_payload)
    except ValueError:
        logger.warning("Consent cookie payload is not valid base64.")
        return None

    if not verify_signature(signature_hex, payload, secret):
        logger.warning("Consent cookie signature verification failed.")
        return None

    try:
        clients = json.loads(payload.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        logger.warning("Consent cookie payload is not JSON.")
        return None

    if not isinstance(clients, list):
        logger.warning("Consent cookie payload is not an array.")
        return None
    if not all(isinstance(item, str) for item in clients):
        logger.warning("Consent cookie payload contains non-string elements.")
        return None
    return clients


def find_cookie(cookie_header: str | None, name: str) -> str | None:
    """Extract one cookie's raw value from a Cookie header."""
    if not cookie_header:
        return None
    prefix = f"{name}="
    for cookie in cookie_header.split(";"):
        cookie = cookie.strip()
        if cookie.startswith(prefix):
            return cookie[len(prefix):]
    return None


# =============================================================================
# Consent Store
# =============================================================================


class ApprovalRequest(BaseModel):
    """The parts of the consent-form POST the store needs."""

    model_config = ConfigDict(frozen=True)

    method: str
    form: Mapping[str, Any] = Field(default_factory=dict)
    cookie_header: str | None = None


class ApprovalResult(BaseModel):
    """Outcome of a successful approval: the decoded state and cookie header."""

    state: dict[str, Any]
    client_id: str
    approved_clients: list[str]
    set_cookie: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Set-Cookie": self.set_cookie}


class SignedConsentStore:
    """
    Read-verify-update-sign cycle for the approved-clients cookie.

    The store holds no state besides its configuration; everything it knows
    about a browser comes from the Cookie header passed in.

    Usage:
        store = SignedConsentStore(secret=settings.cookie_secret)
        if store.is_approved(request.headers.get("cookie"), client_id):
            ...
        result = store.record_approval(ApprovalRequest(method="POST", form=form,
                                                       cookie_header=cookie))
        response.headers["Set-Cookie"] = result.set_cookie
    """

    def __init__(
        self,
        secret: str | bytes,
        cookie_name: str = CONSENT_COOKIE_NAME,
        max_age: int = CONSENT_COOKIE_MAX_AGE,
    ) -> None:
        self.secret = secret
        self.cookie_name = cookie_name
        self.max_age = max_age

    def approved_clients(self, cookie_header: str | None) -> list[str] | None:
        """Return the verified consent list, or None if absent or invalid."""
        value = find_cookie(cookie_header, self.cookie_name)
        if value is None:
            return None
        try:
            return decode_consent(value, self.secret)
        except ClickUpConfigurationError:
            logger.error("Consent cookie cannot be verified: no cookie secret configured")
            return None

    def is_approved(self, cookie_header: str | None, client_id: str) -> bool:
        if not client_id:
            return False
        clients = self.approved_clients(cookie_header)
        return clients is not None and client_id in clients

    def build_set_cookie(self, clients: list[str]) -> str:
        value = encode_consent(clients, self.secret)
        return (
            f"{self.cookie_name}={value}; HttpOnly; Secure; Path=/; "
            f"SameSite=Lax; Max-Age={self.max_age}"
        )

    def record_approval(self, request: ApprovalRequest) -> ApprovalResult:
        """Add the client id embedded in the form state to the consent list.

        Raises:
            ConsentError: Wrong method, missing or undecodable state, or no
                client id in the state.
            ClickUpConfigurationError: No cookie secret configured.
        """
        if request.method.upper() != "POST":
            raise ConsentError("Invalid request method. Expected POST.")

        encoded_state = request.form.get("state")
        if not isinstance(encoded_state, str) or not encoded_state:
            raise ConsentError("Failed to parse approval form: missing or invalid 'state'")

        try:
            state = decode_state(encoded_state)
        except ConsentError as e:
            raise ConsentError(f"Failed to parse approval form: {e}") from e

        oauth_req_info = state.get("oauthReqInfo") if isinstance(state, dict) else None
        client_id = oauth_req_info.get("clientId") if isinstance(oauth_req_info, dict) else None
        if not isinstance(client_id, str) or not client_id:
            raise ConsentError(
                "Failed to parse approval form: could not extract clientId from state"
            )

        existing = self.approved_clients(request.cookie_header) or []
        updated = list(dict.fromkeys([*existing, client_id]))
        set_cookie = self.build_set_cookie(updated)
        logger.info("Recorded OAuth approval for client %s", client_id)

        return ApprovalResult(
            state=state,
            client_id=client_id,
            approved_clients=updated,
            set_cookie=set_cookie,
        )


def is_approved(cookie_header: str | None, client_id: str, secret: str | bytes) -> bool:
    """Whether client_id appears in a verified consent cookie. Never raises."""
    return SignedConsentStore(secret).is_approved(cookie_header, client_id)


def record_approval(request: ApprovalRequest, secret: str | bytes) -> ApprovalResult:
    """Record an approval from the consent-form POST."""
    return SignedConsentStore(secret).record_approval(request)
