"""Structured errors for the Raindrops server."""
#
# PURPOSE:
# Every failure a route can produce is raised as a RaindropsError carrying an
# ErrorCode. A single exception handler in raindrops/server/api.py converts it
# into an HTTP status and a JSON body, so handlers never build error
# responses by hand.
#
# ERROR CODE FORMAT:
# - AUTH_XXX: permission flags switched off by the operator
# - PATH_XXX: path resolution and lookup
# - REQUEST_XXX: malformed requests
# - UPLOAD_XXX: upload pipeline
# - ARCHIVE_XXX: directory download pipeline
# - SYSTEM_XXX: anything else
#
# USAGE:
#   from raindrops.errors import RaindropsError, ErrorCode
#
#   raise RaindropsError(
#       ErrorCode.PATH_TRAVERSAL,
#       "Path escapes the storage root",
#       details={"path": "../etc"}
#   )
#
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    # Permission gate
    AUTH_READ_DISABLED = "AUTH_001"
    AUTH_WRITE_DISABLED = "AUTH_002"

    # Path resolution
    PATH_TRAVERSAL = "PATH_001"
    PATH_NOT_FOUND = "PATH_002"

    # Static resources
    RESOURCE_NOT_FOUND = "RESOURCE_001"

    # Request validation
    REQUEST_MISSING_FIELD = "REQUEST_001"
    REQUEST_INVALID_BODY = "REQUEST_002"

    # Upload pipeline
    UPLOAD_OPEN_FAILED = "UPLOAD_001"
    UPLOAD_WRITE_FAILED = "UPLOAD_002"
    UPLOAD_TOO_LARGE = "UPLOAD_003"

    # Archive pipeline
    ARCHIVE_START_FAILED = "ARCHIVE_001"

    # System
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class RaindropsError(Exception):
    """
    Base exception with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "PATH_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
        http_status: HTTP status code for API responses
    """

    HTTP_STATUS_MAP: Dict[ErrorCode, int] = {
        ErrorCode.AUTH_READ_DISABLED: 403,     # Forbidden
        ErrorCode.AUTH_WRITE_DISABLED: 403,
        ErrorCode.PATH_TRAVERSAL: 403,
        ErrorCode.PATH_NOT_FOUND: 404,         # Not Found
        ErrorCode.RESOURCE_NOT_FOUND: 404,
        ErrorCode.REQUEST_MISSING_FIELD: 400,  # Bad Request
        ErrorCode.REQUEST_INVALID_BODY: 400,
        ErrorCode.UPLOAD_OPEN_FAILED: 500,     # Internal Server Error
        ErrorCode.UPLOAD_WRITE_FAILED: 500,
        ErrorCode.UPLOAD_TOO_LARGE: 413,       # Payload Too Large
        ErrorCode.ARCHIVE_START_FAILED: 500,
        ErrorCode.SYSTEM_INTERNAL_ERROR: 500,
    }

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.http_status = http_status or self.HTTP_STATUS_MAP.get(code, 500)

        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a JSON-serializable dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "http_status": self.http_status
        }


__all__ = ["ErrorCode", "RaindropsError"]
