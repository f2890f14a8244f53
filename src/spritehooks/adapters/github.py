"""GitHub webhook adapter."""

from __future__ import annotations

from typing import Any

from spritehooks.adapters.base import (
    UNKNOWN_EVENT,
    InboundRequest,
    SourceAdapter,
    constant_time_equals,
    hmac_sha256_hex,
)

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"
SIGNATURE_PREFIX = "sha256="


class GitHubAdapter(SourceAdapter):
    """Validates ``X-Hub-Signature-256`` and reads the event from ``X-GitHub-Event``."""

    name = "github"

    def validate(self, request: InboundRequest, secret: str) -> bool:
        signature = request.header(SIGNATURE_HEADER)
        if not signature:
            return False

        expected = SIGNATURE_PREFIX + hmac_sha256_hex(secret, request.body)
        return constant_time_equals(signature, expected)

    def get_event_type(self, request: InboundRequest, payload: Any = None) -> str:
        return request.header(EVENT_HEADER) or UNKNOWN_EVENT

    @staticmethod
    def sign(secret: str, body: bytes) -> str:
        """Signature header value for ``body`` (useful for testing)."""
        return SIGNATURE_PREFIX + hmac_sha256_hex(secret, body)
