"""Error codes for datastar-sse."""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # Configuration errors (1xxx)
    CONFIG_INVALID = "DS-1001"
    CONFIG_LOAD_FAILED = "DS-1002"

    # Command validation errors (2xxx)
    COMMAND_MISSING_INPUT = "DS-2001"
    COMMAND_INVALID_TYPE = "DS-2002"
    COMMAND_INVALID_OPTIONS = "DS-2003"
    COMMAND_SERIALIZATION_ERROR = "DS-2004"

    # Signal parsing errors (3xxx)
    SIGNALS_MISSING = "DS-3001"
    SIGNALS_PARSE_ERROR = "DS-3002"
    SIGNALS_NOT_AN_OBJECT = "DS-3003"

    # Transport errors (4xxx)
    TRANSPORT_CLOSED = "DS-4001"

    # Unknown error
    UNKNOWN = "DS-9999"

    def __str__(self) -> str:
        """Return the error code value."""
        return self.value
