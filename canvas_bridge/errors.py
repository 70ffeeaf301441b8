"""
Error Normalization

Turns whatever a Canvas request raised into one CanvasAPIError.
"""

import json
import logging
from typing import Any, Optional

import requests

from .exceptions import CanvasAPIError, ErrorKind

logger = logging.getLogger("canvas_bridge.errors")

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred in CanvasClient"


def _response_of(error: BaseException) -> Optional[requests.Response]:
    if isinstance(error, requests.RequestException):
        return error.response
    return None


def _structured_errors(response: Optional[requests.Response]) -> Any:
    """Return the ``errors`` field of a JSON error body, or None."""
    if response is None:
        return None
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("errors")
    return None


def _present(errors: Any) -> bool:
    """True for any ``errors`` value except None, "", 0 and False; empty lists and objects count."""
    if errors is None or isinstance(errors, bool):
        return bool(errors)
    if isinstance(errors, (str, int, float)):
        return errors != "" and errors != 0
    return True


def normalize_error(error: BaseException) -> CanvasAPIError:
    """
    Convert a failed request into a CanvasAPIError.

    Decision order:
        1. A response body with an ``errors`` field: the message is that
           field serialized as JSON.
        2. An exception with a message: the message itself.
        3. Anything else: a fixed unknown-error message.

    Args:
        error: The exception raised while sending or decoding a request

    Returns:
        CanvasAPIError to raise in place of the original exception
    """
    if isinstance(error, CanvasAPIError):
        return error

    response = _response_of(error)
    status_code = response.status_code if response is not None else None

    errors = _structured_errors(response)
    if _present(errors):
        return CanvasAPIError(
            json.dumps(errors),
            kind=ErrorKind.UPSTREAM,
            status_code=status_code,
            errors=errors,
        )

    message = str(error)
    if message:
        return CanvasAPIError(message, kind=ErrorKind.TRANSPORT, status_code=status_code)

    logger.debug(f"Unrecognized failure type: {type(error).__name__}")
    return CanvasAPIError(UNKNOWN_ERROR_MESSAGE, kind=ErrorKind.UNKNOWN, status_code=status_code)
