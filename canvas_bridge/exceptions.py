"""
Custom Exceptions for Canvas Bridge

Provides specific exception types for different error conditions.
"""

from enum import Enum
from typing import Any, Optional


class CanvasBridgeError(Exception):
    """Base exception for all Canvas Bridge errors."""
    pass


class ConfigurationError(CanvasBridgeError):
    """Raised when configuration is missing or invalid."""
    pass


class ValidationError(CanvasBridgeError):
    """Raised when input validation fails."""
    pass


class ErrorKind(str, Enum):
    """Where a failed Canvas request went wrong."""

    UPSTREAM = "upstream"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


class CanvasAPIError(CanvasBridgeError):
    """
    The single failure raised for any Canvas request that did not succeed.

    Attributes:
        kind: UPSTREAM when Canvas answered with a structured ``errors`` body,
            TRANSPORT for network, HTTP or decode failures without one,
            UNKNOWN when neither applies
        status_code: HTTP status, when a response was received
        errors: The structured ``errors`` payload for UPSTREAM failures
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status_code: Optional[int] = None,
        errors: Any = None,
    ):
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.errors = errors
        super().__init__(message)


class ToolInvocationError(CanvasBridgeError):
    """Raised by a tool binding when its action fails."""

    def __init__(self, action: str, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.action = action
        self.cause = cause
        if message is None:
            detail = str(cause) if cause is not None and str(cause) else "Unknown error"
            message = f"Failed to {action}: {detail}"
        super().__init__(message)
