"""Datastar server-sent event protocol.

Outbound commands that patch the client's DOM and signals, and the inbound
reader for signals the client sends back.
Reference: https://data-star.dev/
"""

from datastar_sse.protocol.encoder import DEFAULT_HEADERS, EventEncoder, format_event
from datastar_sse.protocol.generator import ServerSentEventGenerator
from datastar_sse.protocol.models import (
    EventType,
    ExecuteScriptOptions,
    MergeFragmentsOptions,
    MergeMode,
    MergeSignalsOptions,
    RemoveFragmentsOptions,
    SendOptions,
)
from datastar_sse.protocol.script import ScriptSanitizer, sanitize_script
from datastar_sse.protocol.signals import read_signals

__all__ = [
    "DEFAULT_HEADERS",
    "EventEncoder",
    "EventType",
    "ExecuteScriptOptions",
    "MergeFragmentsOptions",
    "MergeMode",
    "MergeSignalsOptions",
    "RemoveFragmentsOptions",
    "ScriptSanitizer",
    "SendOptions",
    "ServerSentEventGenerator",
    "format_event",
    "read_signals",
    "sanitize_script",
]
