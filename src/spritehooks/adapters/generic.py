"""Generic webhook adapter for custom senders with a shared secret."""

from __future__ import annotations

from typing import Any

from spritehooks.adapters.base import InboundRequest, SourceAdapter, constant_time_equals

SECRET_HEADER = "X-Webhook-Secret"
EVENT_HEADER = "X-Event-Type"
DEFAULT_EVENT = "message"


class GenericAdapter(SourceAdapter):
    """Compares ``X-Webhook-Secret`` with the configured secret directly."""

    name = "generic"

    def validate(self, request: InboundRequest, secret: str) -> bool:
        provided = request.header(SECRET_HEADER)
        if not provided:
            return False
        return constant_time_equals(provided, secret)

    def get_event_type(self, request: InboundRequest, payload: Any = None) -> str:
        return request.header(EVENT_HEADER) or DEFAULT_EVENT
