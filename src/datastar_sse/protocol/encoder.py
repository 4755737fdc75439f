"""Datastar event encoder for SSE streaming."""

from collections.abc import Mapping, Sequence
from typing import Any

from datastar_sse.config import Settings, get_settings
from datastar_sse.logging import get_logger
from datastar_sse.protocol.models import EventType, SendOptions

logger = get_logger(__name__)

DEFAULT_HEADERS: Mapping[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Content-Type": "text/event-stream",
}


def format_event(
    event_type: EventType | str,
    data_lines: Sequence[str],
    event_id: int | None = None,
    retry_duration: int = 1000,
    comment: str = "dev",
) -> str:
    """Render one protocol event.

    Args:
        event_type: Event-type token; the ``event:`` line is omitted when empty
        data_lines: Pre-formatted data lines, written in order
        event_id: Optional ``id:`` value
        retry_duration: ``retry:`` value in milliseconds
        comment: Diagnostic comment literal

    Returns:
        SSE-formatted string terminated by a blank line
    """
    if isinstance(event_type, EventType):
        event_type = event_type.value

    parts = [f'comment: "{comment}"\n']
    if event_id is not None:
        parts.append(f"id: {event_id}\n")
    if event_type:
        parts.append(f"event: {event_type}\n")
    parts.append(f"retry: {retry_duration}\n")
    parts.extend(f"data: {line}\n" for line in data_lines)
    parts.append("\n")
    return "".join(parts)


class EventEncoder:
    """Encodes Datastar events and writes them to a bound response.

    Tracks whether the protocol headers were already emitted for the
    connection, so they are set at most once and always before the first
    event is written.

    The response is optional. Transports that build their own response from
    a stream read ``headers`` and consume the string returned by ``send``.
    """

    def __init__(self, response: Any = None, settings: Settings | None = None):
        """Initialize event encoder.

        Args:
            response: Object exposing ``set_header`` and/or ``write``
            settings: Settings supplying protocol defaults
        """
        self.response = response
        self.settings = settings or get_settings()
        self.headers: dict[str, str] = dict(DEFAULT_HEADERS)
        self.headers_sent = False

    def get_content_type(self) -> str:
        """Get the content type for this encoder."""
        return self.headers["Content-Type"]

    def send(
        self,
        event_type: EventType | str,
        data_lines: Sequence[str],
        options: SendOptions | None = None,
    ) -> str:
        """Render an event, emit headers once, and write it to the response.

        Args:
            event_type: Event-type token
            data_lines: Pre-formatted data lines
            options: Event id and retry duration

        Returns:
            The rendered event string
        """
        options = options or SendOptions()
        retry_duration = options.retry_duration
        if retry_duration is None:
            retry_duration = self.settings.default_retry_duration

        event = format_event(
            event_type,
            data_lines,
            event_id=options.event_id,
            retry_duration=retry_duration,
            comment=self.settings.event_comment,
        )

        if not self.headers_sent:
            self._emit_headers()

        write = getattr(self.response, "write", None)
        if callable(write):
            write(event)

        logger.debug(
            "Event sent",
            event_type=str(getattr(event_type, "value", event_type)),
            event_id=options.event_id,
            data_lines=len(data_lines),
        )
        return event

    def _emit_headers(self) -> None:
        set_header = getattr(self.response, "set_header", None)
        if callable(set_header):
            for key, value in self.headers.items():
                set_header(key, value)
            logger.debug("Headers sent", headers=list(self.headers))
        self.headers_sent = True
