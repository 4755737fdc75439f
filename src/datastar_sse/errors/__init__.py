"""datastar-sse error handling system."""

from datastar_sse.errors.base import (
    CommandValidationError,
    ConfigurationError,
    DatastarError,
    SignalParseError,
    TransportError,
)
from datastar_sse.errors.codes import ErrorCode
from datastar_sse.errors.handlers import format_error, status_code_for

__all__ = [
    "CommandValidationError",
    "ConfigurationError",
    "DatastarError",
    "ErrorCode",
    "SignalParseError",
    "TransportError",
    "format_error",
    "status_code_for",
]
