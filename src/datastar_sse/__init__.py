"""datastar-sse - Datastar server-sent events for Python."""

from datastar_sse.config import Settings, get_settings
from datastar_sse.errors import CommandValidationError, DatastarError, SignalParseError
from datastar_sse.protocol import (
    EventType,
    ExecuteScriptOptions,
    MergeFragmentsOptions,
    MergeMode,
    MergeSignalsOptions,
    RemoveFragmentsOptions,
    SendOptions,
    ServerSentEventGenerator,
    read_signals,
    sanitize_script,
)
from datastar_sse.transport import StreamResponse, sse_response

__version__ = "0.1.0"

__all__ = [
    "CommandValidationError",
    "DatastarError",
    "EventType",
    "ExecuteScriptOptions",
    "MergeFragmentsOptions",
    "MergeMode",
    "MergeSignalsOptions",
    "RemoveFragmentsOptions",
    "SendOptions",
    "ServerSentEventGenerator",
    "Settings",
    "SignalParseError",
    "StreamResponse",
    "get_settings",
    "read_signals",
    "sanitize_script",
    "sse_response",
]
