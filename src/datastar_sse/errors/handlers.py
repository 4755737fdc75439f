"""Error handling utilities."""

import traceback
from typing import Any

from datastar_sse.errors.base import (
    CommandValidationError,
    DatastarError,
    SignalParseError,
    TransportError,
)
from datastar_sse.errors.codes import ErrorCode


def format_error(error: Exception) -> dict[str, Any]:
    """Format any exception into a standardized error response.

    Args:
        error: The exception to format

    Returns:
        Dictionary containing error details
    """
    if isinstance(error, DatastarError):
        return error.to_dict()

    return {
        "error": error.__class__.__name__,
        "code": str(ErrorCode.UNKNOWN),
        "message": str(error),
        "details": {
            "traceback": traceback.format_exc(),
        },
    }


def status_code_for(error: Exception) -> int:
    """Map an exception to the HTTP status a server should answer with."""
    if isinstance(error, (CommandValidationError, SignalParseError)):
        return 400
    if isinstance(error, TransportError):
        return 503
    return 500
