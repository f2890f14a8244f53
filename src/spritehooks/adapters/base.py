"""Source adapter interface.

Each webhook source (GitHub, Slack, ...) implements this interface. The
request body is captured once into an InboundRequest so that signature
validation and payload parsing both see the same raw bytes.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from spritehooks.errors import PayloadDecodeError

logger = logging.getLogger(__name__)

UNKNOWN_EVENT = "unknown"


@dataclass(frozen=True)
class InboundRequest:
    """A captured webhook request: headers plus the raw body."""

    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        normalized = {str(k).lower(): str(v) for k, v in dict(self.headers).items()}
        object.__setattr__(self, "headers", normalized)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup; empty values count as absent."""
        return self.headers.get(name.lower()) or None


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def constant_time_equals(provided: str, expected: str) -> bool:
    """Compare two strings without leaking timing; False on any bad input."""
    try:
        provided_bytes = provided.encode("utf-8")
        expected_bytes = expected.encode("utf-8")
    except (AttributeError, UnicodeEncodeError):
        return False
    if len(provided_bytes) != len(expected_bytes):
        return False
    return hmac.compare_digest(provided_bytes, expected_bytes)


class SourceAdapter(ABC):
    """Validates, classifies and parses requests from one webhook source."""

    #: Adapter identifier, matches ``source.type`` in automation definitions
    name: str = ""

    @abstractmethod
    def validate(self, request: InboundRequest, secret: str) -> bool:
        """Check the request is authentic. Must return False rather than raise."""

    def get_event_type(self, request: InboundRequest, payload: Any = None) -> str:
        """Event type label for the request."""
        return UNKNOWN_EVENT

    def parse_payload(self, request: InboundRequest) -> Any:
        """Decode the JSON body; an empty body is an empty object."""
        if not request.body.strip():
            return {}
        try:
            return json.loads(request.body)
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise PayloadDecodeError(
                f"Request body is not valid JSON: {e}", {"source": self.name}
            ) from e

    def handshake(self, payload: Any) -> dict[str, Any] | None:
        """Response for protocol handshakes that bypass automation matching."""
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
