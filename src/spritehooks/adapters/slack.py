"""Slack Events API adapter.

Slack signs ``v0:{timestamp}:{body}`` with the app's signing secret and sends:

- ``X-Slack-Request-Timestamp``: Unix time the request was sent
- ``X-Slack-Signature``: ``v0=<hex digest>``

The event type lives in the body. ``event_callback`` payloads carry the real
type under ``event.type``; ``url_verification`` payloads are the endpoint
handshake and are answered by echoing the challenge.

See https://api.slack.com/authentication/verifying-requests-from-slack
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from spritehooks.adapters.base import (
    UNKNOWN_EVENT,
    InboundRequest,
    SourceAdapter,
    constant_time_equals,
    hmac_sha256_hex,
)

logger = logging.getLogger(__name__)

TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
SIGNATURE_HEADER = "X-Slack-Signature"
SIGNATURE_VERSION = "v0"

# Requests older than this are treated as replays
MAX_REQUEST_AGE_SECONDS = 60 * 5


def is_url_verification(payload: Any) -> bool:
    return (
        isinstance(payload, Mapping)
        and payload.get("type") == "url_verification"
        and isinstance(payload.get("challenge"), str)
    )


def is_event_callback(payload: Any) -> bool:
    return (
        isinstance(payload, Mapping)
        and payload.get("type") == "event_callback"
        and isinstance(payload.get("event"), Mapping)
    )


def get_slack_event_type(payload: Any) -> str:
    """Extract the actual event type from a Slack payload."""
    if is_url_verification(payload):
        return "url_verification"
    if is_event_callback(payload):
        event_type = payload["event"].get("type")
        return event_type if isinstance(event_type, str) and event_type else UNKNOWN_EVENT
    if isinstance(payload, Mapping) and isinstance(payload.get("type"), str):
        return payload["type"]
    return UNKNOWN_EVENT


class SlackAdapter(SourceAdapter):
    name = "slack"

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def validate(self, request: InboundRequest, secret: str) -> bool:
        timestamp = request.header(TIMESTAMP_HEADER)
        signature = request.header(SIGNATURE_HEADER)
        if not timestamp or not signature:
            return False

        try:
            request_time = int(timestamp.strip())
        except ValueError:
            return False

        if abs(int(self._clock()) - request_time) > MAX_REQUEST_AGE_SECONDS:
            logger.warning("Slack request timestamp is outside the replay window")
            return False

        expected = self.sign(secret, timestamp, request.body)
        return constant_time_equals(signature, expected)

    def get_event_type(self, request: InboundRequest, payload: Any = None) -> str:
        return get_slack_event_type(payload)

    def handshake(self, payload: Any) -> dict[str, Any] | None:
        if is_url_verification(payload):
            return {"challenge": payload["challenge"]}
        return None

    @staticmethod
    def sign(secret: str, timestamp: str, body: bytes) -> str:
        """Signature header value for a request (useful for testing)."""
        base = f"{SIGNATURE_VERSION}:{timestamp}:".encode() + body
        return f"{SIGNATURE_VERSION}={hmac_sha256_hex(secret, base)}"
