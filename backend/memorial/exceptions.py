"""
Memorial Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the error scenarios a request can hit.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       structured JSON error responses with the right HTTP status code.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    MemorialError (base)          → 500 Internal Server Error
    ├── ValidationError           → 400 Bad Request (client can fix)
    └── PinningServiceError       → 500 Internal Server Error (upload failed)

Per-tile image failures are deliberately absent: they are recovered inside
the tile service and never reach a handler.
"""

from typing import Any, Dict, Optional


class MemorialError(Exception):
    """
    Base exception for all Memorial application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where noted)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MemorialError):
    """
    Raised when client input fails a business rule.

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "At least one engager is required",
            "details": {"field": "engagers"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class PinningServiceError(MemorialError):
    """
    Raised when an upload to the pinning service fails.

    What:    pinFileToIPFS or pinJSONToIPFS returned an error, timed out,
             answered without a CID, or credentials are missing.
    HTTP:    500 Internal Server Error
    Retry:   None. The request fails and the client may try again.

    Context keys:
        operation:    "pin_file" or "pin_json"
        status_code:  Upstream HTTP status, when there was a response
        pinned_cid:   CID already pinned earlier in the same request (orphan)
    """

    def __init__(
        self,
        message: str = "Uploading to the pinning service failed",
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.operation = operation
        self.status_code = status_code
