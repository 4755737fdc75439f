"""Request/response collaborators and the streaming response sink.

``ServerSentEventGenerator`` only needs duck-typed objects. The protocols
below describe what it looks for; Starlette's ``Request`` satisfies
``RequestLike`` as is.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from starlette.background import BackgroundTask
from starlette.responses import StreamingResponse

from datastar_sse.errors import ErrorCode, TransportError
from datastar_sse.logging import get_logger

if TYPE_CHECKING:
    from datastar_sse.protocol.encoder import EventEncoder

logger = get_logger(__name__)


@runtime_checkable
class RequestLike(Protocol):
    """Inbound request as seen by the signal reader."""

    method: str

    @property
    def url(self) -> Any: ...


@runtime_checkable
class ResponseLike(Protocol):
    """Response that is mutated in place: headers set, events written."""

    def set_header(self, name: str, value: str) -> None: ...

    def write(self, chunk: str) -> Any: ...


_CLOSED = object()


class StreamResponse:
    """In-memory response sink consumed as an async byte stream.

    Events written by the generator are queued and yielded, UTF-8 encoded,
    to whoever iterates the sink (normally a ``StreamingResponse``).
    Iteration ends after ``close()``.
    """

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.closed = False
        self._queue: asyncio.Queue[Any] = asyncio.Queue()

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def write(self, chunk: str) -> None:
        """Queue an event for the client.

        Raises:
            TransportError: If the sink was already closed
        """
        if self.closed:
            raise TransportError(
                "Cannot write to a closed stream",
                ErrorCode.TRANSPORT_CLOSED,
                {"chunk_length": len(chunk)},
            )
        self._queue.put_nowait(chunk)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is _CLOSED:
                return
            yield chunk.encode("utf-8")


def sse_response(
    encoder: EventEncoder,
    stream: StreamResponse | AsyncIterator[str | bytes],
    status_code: int = 200,
    headers: Mapping[str, str] | None = None,
    background: BackgroundTask | None = None,
) -> StreamingResponse:
    """Wrap an event stream in a Starlette response carrying the protocol headers.

    Args:
        encoder: Encoder whose header set is sent with the response
        stream: Sink written by the encoder, or any async iterator of events
        status_code: HTTP status code
        headers: Extra headers merged over the protocol headers
        background: Task run after the stream completes

    Returns:
        Streaming response ready to return from a route
    """
    response_headers = {**encoder.headers, **(headers or {})}
    encoder.headers_sent = True
    logger.debug("Streaming response created", status_code=status_code)
    return StreamingResponse(
        stream,
        status_code=status_code,
        headers=response_headers,
        media_type=encoder.get_content_type(),
        background=background,
    )
