"""Structured API error responses.

Every error leaves the API in the same shape:

    {"error": {"error_code": ..., "message": ..., "details": {...}, "request_id": ...}}
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from spritehooks.errors import SpritehooksError

# =============================================================================
# Response Models
# =============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context about the error",
    )
    request_id: str | None = Field(None, description="Request ID for tracing (if available)")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: ErrorDetail = Field(..., description="Error details")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": {
                        "error_code": "INVALID_SIGNATURE",
                        "message": "Invalid signature",
                        "details": {"source": "github"},
                        "request_id": "abc12345",
                    }
                }
            ]
        }
    }


class RateLimitErrorResponse(BaseModel):
    """Rate limit exceeded response."""

    error: ErrorDetail = Field(..., description="Error details")
    retry_after: int = Field(..., description="Seconds until rate limit resets")


# =============================================================================
# Error Code Mapping
# =============================================================================

ERROR_STATUS_MAP: dict[str, int] = {
    # Authenticity (400, 401)
    "AUTH_FAILED": 401,
    "INVALID_SIGNATURE": 401,
    "UNKNOWN_SOURCE": 400,
    # Validation (400)
    "VALIDATION": 400,
    # Not Found (404)
    "NOT_FOUND": 404,
    # Rate Limiting (429)
    "RATE_LIMITED": 429,
    # Server Errors (500)
    "SPRITEHOOKS_ERROR": 500,
    "CONFIGURATION_ERROR": 500,
    "CATALOG_ERROR": 500,
}


def get_status_code(error_code: str) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_STATUS_MAP.get(error_code, 500)


# =============================================================================
# Exception Handlers
# =============================================================================


def spritehooks_error_to_response(
    error: SpritehooksError,
    request_id: str | None = None,
) -> JSONResponse:
    """Convert a SpritehooksError to a structured JSON response."""
    content = ErrorResponse(
        error=ErrorDetail(
            error_code=error.code,
            message=error.message,
            details=error.details,
            request_id=request_id,
        )
    )
    return JSONResponse(status_code=get_status_code(error.code), content=content.model_dump())


async def spritehooks_exception_handler(
    request: Request,
    exc: SpritehooksError,
) -> JSONResponse:
    """FastAPI exception handler for SpritehooksError."""
    return spritehooks_error_to_response(exc, request.headers.get("X-Request-ID"))


class APIException(HTTPException):
    """HTTPException with a structured error body."""

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.error_code = error_code
        self.message = message
        self.error_details = details or {}
        super().__init__(status_code=status_code, detail=message)

    def to_response(self, request_id: str | None = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                error_code=self.error_code,
                message=self.message,
                details=self.error_details,
                request_id=request_id,
            )
        )


async def api_exception_handler(
    request: Request,
    exc: APIException,
) -> JSONResponse:
    """FastAPI exception handler for APIException."""
    request_id = request.headers.get("X-Request-ID")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(request_id).model_dump(),
    )


# =============================================================================
# Common Response Definitions
# =============================================================================

COMMON_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Bad Request - Invalid input or unknown source"},
    401: {"model": ErrorResponse, "description": "Unauthorized - Missing or invalid credentials"},
    404: {"model": ErrorResponse, "description": "Not Found - Resource does not exist"},
    429: {"model": RateLimitErrorResponse, "description": "Rate Limited - Too many requests"},
    500: {"model": ErrorResponse, "description": "Internal Server Error"},
}


def responses(*status_codes: int) -> dict:
    """Generate responses dict for specific status codes.

    Usage:
        @router.get("/items/{id}", responses=responses(404, 500))
        def get_item(id: str): ...
    """
    return {code: COMMON_RESPONSES[code] for code in status_codes if code in COMMON_RESPONSES}


ADMIN_RESPONSES = responses(401, 500)
CRUD_RESPONSES = responses(400, 401, 404, 500)


# =============================================================================
# Helper Functions
# =============================================================================


def not_found(resource: str, identifier: str) -> APIException:
    """Create a not found exception."""
    return APIException(
        status_code=404,
        error_code="NOT_FOUND",
        message=f"{resource} '{identifier}' not found",
        details={"resource": resource, "identifier": identifier},
    )


def unauthorized(message: str = "Unauthorized") -> APIException:
    """Create an unauthorized exception."""
    return APIException(status_code=401, error_code="AUTH_FAILED", message=message)


def bad_request(message: str, details: dict[str, Any] | None = None) -> APIException:
    """Create a bad request exception."""
    return APIException(status_code=400, error_code="VALIDATION", message=message, details=details)


def internal_error(
    message: str = "An internal error occurred",
    details: dict[str, Any] | None = None,
) -> APIException:
    """Create an internal server error exception."""
    return APIException(
        status_code=500,
        error_code="INTERNAL_ERROR",
        message=message,
        details=details,
    )
