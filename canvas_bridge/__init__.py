"""
Canvas Bridge - Canvas LMS REST API exposed as MCP tools.

Student names and contact details are anonymized by default before any
result leaves the process.
"""

__version__ = "0.1.0"

from .client import get_canvas_client, reset_canvas_client, CanvasClient, encode_segment
from .errors import normalize_error
from .exceptions import (
    CanvasBridgeError,
    ConfigurationError,
    ValidationError,
    CanvasAPIError,
    ErrorKind,
    ToolInvocationError,
)
from .anonymizer import (
    AnonymizationPolicy,
    DEFAULT_POLICY,
    anonymize_users,
    anonymize_assignments,
    anonymize_submissions,
)
from .options import AccessOptions
from .registry import ToolRegistry, MCPToolRegistry
from .tools import register_all_tools

__all__ = [
    # Client
    "get_canvas_client",
    "reset_canvas_client",
    "CanvasClient",
    "encode_segment",
    "normalize_error",
    # Exceptions
    "CanvasBridgeError",
    "ConfigurationError",
    "ValidationError",
    "CanvasAPIError",
    "ErrorKind",
    "ToolInvocationError",
    # Anonymization
    "AnonymizationPolicy",
    "DEFAULT_POLICY",
    "anonymize_users",
    "anonymize_assignments",
    "anonymize_submissions",
    "AccessOptions",
    # Tools
    "ToolRegistry",
    "MCPToolRegistry",
    "register_all_tools",
]
