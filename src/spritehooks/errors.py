"""Spritehooks Error Hierarchy.

Structured exception types for webhook dispatch and scheduling.
"""

from __future__ import annotations


class SpritehooksError(Exception):
    """Base error for all spritehooks exceptions."""

    code = "SPRITEHOOKS_ERROR"

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Authenticity Errors
class AuthenticityError(SpritehooksError):
    """Inbound request could not be authenticated."""

    code = "AUTH_FAILED"


class UnknownSourceError(AuthenticityError):
    """No adapter is registered for the requested source."""

    code = "UNKNOWN_SOURCE"

    def __init__(self, source: str):
        super().__init__(f"Unknown source: {source}", {"source": source})
        self.source = source


class InvalidSignatureError(AuthenticityError):
    """Signature validation failed."""

    code = "INVALID_SIGNATURE"

    def __init__(self, source: str):
        super().__init__("Invalid signature", {"source": source})
        self.source = source


class PayloadDecodeError(SpritehooksError):
    """Request body could not be decoded."""

    code = "VALIDATION"


# Configuration Errors
class ConfigurationError(SpritehooksError):
    """A required secret or credential is missing."""

    code = "CONFIGURATION_ERROR"


# Catalog Errors
class CatalogError(SpritehooksError):
    """The automation catalog could not be read or written."""

    code = "CATALOG_ERROR"

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message, {"status_code": status_code} if status_code else {})
        self.status_code = status_code


class AutomationValidationError(SpritehooksError):
    """An automation definition is malformed."""

    code = "VALIDATION"
