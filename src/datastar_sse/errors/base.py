"""Base exception classes for datastar-sse."""

from typing import Any

from datastar_sse.errors.codes import ErrorCode


class DatastarError(Exception):
    """Base exception for all datastar-sse errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize error.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error string."""
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": str(self.code),
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DatastarError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error."""
        super().__init__(message, code, details)


class CommandValidationError(DatastarError, ValueError):
    """A command builder received missing or malformed input.

    Raised before any data line is rendered, so nothing reaches the wire.
    """

    def __init__(
        self,
        command: str,
        message: str,
        code: ErrorCode = ErrorCode.COMMAND_MISSING_INPUT,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize command validation error.

        Args:
            command: Name of the command that rejected its input
            message: Error message
            code: Error code
            details: Additional context
        """
        super().__init__(f"{command} {message}", code, {"command": command, **(details or {})})
        self.command = command


class SignalParseError(DatastarError, ValueError):
    """Inbound signal payload was absent or not a JSON object."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNALS_PARSE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize signal parse error."""
        super().__init__(message, code, details)


class TransportError(DatastarError):
    """The underlying response could not accept a write."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TRANSPORT_CLOSED,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize transport error."""
        super().__init__(message, code, details)
