"""Reading signals sent back by the client."""

import inspect
import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlsplit

from datastar_sse.errors import ErrorCode, SignalParseError
from datastar_sse.logging import get_logger

logger = get_logger(__name__)


def _loads(text: str | bytes, source: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise SignalParseError(
            f"Invalid signals JSON in {source}",
            ErrorCode.SIGNALS_PARSE_ERROR,
            {"source": source, "reason": str(e)},
        ) from e


def _signals_from_query(url: Any, query_param: str) -> Any:
    query = parse_qs(urlsplit(str(url)).query)
    values = query.get(query_param)
    if not values:
        raise SignalParseError(
            f"Missing '{query_param}' query parameter",
            ErrorCode.SIGNALS_MISSING,
            {"query_param": query_param},
        )
    return _loads(values[0], f"query parameter '{query_param}'")


async def _drain_stream(request: Any) -> bytes:
    """Accumulate the raw request body until the stream ends."""
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
    return bytes(body)


async def _signals_from_body(request: Any) -> Any:
    body = getattr(request, "body", None)
    if body is not None and not callable(body):
        if isinstance(body, (str, bytes, bytearray)):
            return _loads(body, "request body")
        return body

    parse_json = getattr(request, "json", None)
    if callable(parse_json):
        try:
            result = parse_json()
            if inspect.isawaitable(result):
                result = await result
        except ValueError as e:
            raise SignalParseError(
                "Invalid signals JSON in request body",
                ErrorCode.SIGNALS_PARSE_ERROR,
                {"source": "request body", "reason": str(e)},
            ) from e
        return result

    return _loads(await _drain_stream(request), "request body")


async def read_signals(
    request: Any,
    baseline: Mapping[str, Any] | None = None,
    query_param: str = "datastar",
) -> dict[str, Any]:
    """Read the client's signals and merge them over a baseline.

    GET requests carry signals as JSON in a query parameter; every other
    method carries them as a JSON request body. Keys read from the request
    replace matching baseline keys; other baseline keys are kept.

    Args:
        request: Object exposing ``method`` and ``url``, plus one of a parsed
            ``body`` attribute, a ``json()`` method, or a ``stream()`` method
            yielding body chunks
        baseline: Signals to merge over
        query_param: Query parameter holding signals on GET requests

    Returns:
        New merged signal map

    Raises:
        SignalParseError: If the payload is missing, malformed, or not an object
    """
    method = str(getattr(request, "method", "GET")).upper()
    if method == "GET":
        signals = _signals_from_query(request.url, query_param)
    else:
        signals = await _signals_from_body(request)

    if not isinstance(signals, Mapping):
        raise SignalParseError(
            "Signals payload must be a JSON object",
            ErrorCode.SIGNALS_NOT_AN_OBJECT,
            {"received": type(signals).__name__},
        )

    logger.debug("Signals read", method=method, keys=sorted(signals))
    return {**(baseline or {}), **signals}
