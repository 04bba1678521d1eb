"""
OAuth authorization helpers.

    - consent: signed cookie remembering which OAuth clients were approved
    - upstream: ClickUp authorize URL and authorization-code exchange
"""

from clickup_mcp.auth.consent import (
    ApprovalRequest,
    ApprovalResult,
    SignedConsentStore,
    decode_state,
    encode_state,
    is_approved,
    record_approval,
)
from clickup_mcp.auth.upstream import build_authorize_url, exchange_code

__all__ = [
    "ApprovalRequest",
    "ApprovalResult",
    "SignedConsentStore",
    "decode_state",
    "encode_state",
    "is_approved",
    "record_approval",
    "build_authorize_url",
    "exchange_code",
]
