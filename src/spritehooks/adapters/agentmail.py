"""AgentMail webhook adapter.

Event types use dot notation and are carried in the body's ``event_type``:

- message.received - New email received
- message.sent - Email sent
- message.delivered - Email delivered to recipient
- message.bounced - Email bounced
- message.complained - Spam complaint received
- message.rejected - Email rejected before sending
- domain.verified - Domain verification completed
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from spritehooks.adapters.base import (
    UNKNOWN_EVENT,
    InboundRequest,
    SourceAdapter,
    constant_time_equals,
    hmac_sha256_hex,
)

SIGNATURE_HEADER = "X-Agentmail-Signature"


def get_agentmail_event_type(payload: Any) -> str:
    if isinstance(payload, Mapping):
        event_type = payload.get("event_type")
        if isinstance(event_type, str) and event_type:
            return event_type
    return UNKNOWN_EVENT


class AgentMailAdapter(SourceAdapter):
    """HMAC-SHA256 over the raw body in ``X-Agentmail-Signature``; no timestamp check."""

    name = "agentmail"

    def validate(self, request: InboundRequest, secret: str) -> bool:
        signature = request.header(SIGNATURE_HEADER)
        if not signature:
            return False

        # Accept both raw hex and prefixed formats
        if signature.startswith("sha256="):
            signature = signature[len("sha256=") :]

        return constant_time_equals(signature, hmac_sha256_hex(secret, request.body))

    def get_event_type(self, request: InboundRequest, payload: Any = None) -> str:
        return get_agentmail_event_type(payload)
