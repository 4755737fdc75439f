"""Tests for reading signals from requests."""

import json
from urllib.parse import quote

import pytest

from datastar_sse.errors import ErrorCode, SignalParseError
from datastar_sse.protocol import ServerSentEventGenerator, read_signals
from tests.fixtures import MockJSONRequest, MockRequest, MockStreamRequest


def get_request(signals: str | None, param: str = "datastar") -> MockRequest:
    url = "http://localhost/readSignals"
    if signals is not None:
        url += f"?{param}={quote(signals)}"
    return MockRequest("GET", url)


class TestReadSignalsGet:
    """Test GET requests carrying signals in the query string."""

    @pytest.mark.asyncio
    async def test_merges_over_baseline(self):
        """Test query signals overwrite matching keys and keep the rest."""
        request = get_request('{"x":1}')
        result = await read_signals(request, {"x": 0, "y": 2})
        assert result == {"x": 1, "y": 2}

    @pytest.mark.asyncio
    async def test_relative_url(self):
        request = MockRequest("GET", "/readSignals?datastar=%7B%22a%22%3A%22b%22%7D")
        assert await read_signals(request) == {"a": "b"}

    @pytest.mark.asyncio
    async def test_baseline_not_mutated(self):
        baseline = {"x": 0}
        await read_signals(get_request('{"x":1}'), baseline)
        assert baseline == {"x": 0}

    @pytest.mark.asyncio
    async def test_shallow_merge(self):
        """Test nested objects are replaced, not deep-merged."""
        request = get_request('{"user":{"name":"b"}}')
        result = await read_signals(request, {"user": {"name": "a", "age": 3}})
        assert result == {"user": {"name": "b"}}

    @pytest.mark.asyncio
    async def test_lowercase_method(self):
        request = get_request('{"x":1}')
        request.method = "get"
        assert await read_signals(request) == {"x": 1}

    @pytest.mark.asyncio
    async def test_custom_query_param(self):
        request = get_request('{"x":1}', param="signals")
        assert await read_signals(request, query_param="signals") == {"x": 1}

    @pytest.mark.asyncio
    async def test_missing_param(self):
        with pytest.raises(SignalParseError) as exc_info:
            await read_signals(get_request(None), {"x": 0})
        assert exc_info.value.code == ErrorCode.SIGNALS_MISSING

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        with pytest.raises(SignalParseError) as exc_info:
            await read_signals(get_request("{not json"))
        assert exc_info.value.code == ErrorCode.SIGNALS_PARSE_ERROR
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    @pytest.mark.asyncio
    async def test_non_object_payload(self):
        with pytest.raises(SignalParseError) as exc_info:
            await read_signals(get_request("[1, 2]"))
        assert exc_info.value.code == ErrorCode.SIGNALS_NOT_AN_OBJECT

    @pytest.mark.asyncio
    async def test_idempotent_merge(self):
        """Test re-reading an empty payload leaves the merged map unchanged."""
        first = await read_signals(get_request('{"x":1}'), {"x": 0, "y": 2})
        second = await read_signals(get_request("{}"), first)
        assert second == first


class TestReadSignalsBody:
    """Test non-GET requests carrying signals in the body."""

    @pytest.mark.asyncio
    async def test_parsed_body_preferred(self):
        request = MockRequest("POST", "/readSignals", body={"x": 5})
        assert await read_signals(request, {"x": 0, "z": 1}) == {"x": 5, "z": 1}

    @pytest.mark.asyncio
    async def test_raw_string_body(self):
        request = MockRequest("PUT", "/readSignals", body='{"x": 5}')
        assert await read_signals(request) == {"x": 5}

    @pytest.mark.asyncio
    async def test_json_method(self):
        request = MockJSONRequest({"theme": "dark"})
        result = await read_signals(request, {"theme": "light", "xyz": "s"})
        assert result == {"theme": "dark", "xyz": "s"}
        assert request.json_calls == 1

    @pytest.mark.asyncio
    async def test_json_method_parse_error(self):
        request = MockJSONRequest(error=json.JSONDecodeError("bad", "{", 1))
        with pytest.raises(SignalParseError):
            await read_signals(request)

    @pytest.mark.asyncio
    async def test_sync_json_method(self):
        """Test a synchronous json() helper is accepted too."""

        class SyncJSONRequest:
            method = "POST"
            url = "/"

            def json(self):
                return {"a": 1}

        assert await read_signals(SyncJSONRequest()) == {"a": 1}

    @pytest.mark.asyncio
    async def test_stream_chunks_accumulated(self):
        request = MockStreamRequest([b'{"x":', b' 1, "y"', b': "z"}'])
        assert await read_signals(request, {"w": 0}) == {"w": 0, "x": 1, "y": "z"}
        assert request.consumed == 3

    @pytest.mark.asyncio
    async def test_stream_text_chunks(self):
        request = MockStreamRequest(['{"a"', ": true}"])
        assert await read_signals(request) == {"a": True}

    @pytest.mark.asyncio
    async def test_stream_multibyte_split_across_chunks(self):
        encoded = '{"s": "é"}'.encode()
        request = MockStreamRequest([encoded[:8], encoded[8:]])
        assert await read_signals(request) == {"s": "é"}

    @pytest.mark.asyncio
    async def test_stream_invalid_json(self):
        with pytest.raises(SignalParseError):
            await read_signals(MockStreamRequest([b"{oops"]))

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        with pytest.raises(SignalParseError):
            await read_signals(MockStreamRequest([]))

    @pytest.mark.asyncio
    async def test_stream_error_propagates(self):
        """Test a failing body stream rejects instead of hanging."""
        request = MockStreamRequest([b'{"x":'], error=ConnectionError("reset"))
        with pytest.raises(ConnectionError):
            await read_signals(request)


class TestGeneratorReadSignals:
    """Test read_signals through the generator."""

    @pytest.mark.asyncio
    async def test_uses_bound_request(self, settings):
        sse = ServerSentEventGenerator(get_request('{"x":1}'), settings=settings)
        assert await sse.read_signals({"x": 0, "y": 2}) == {"x": 1, "y": 2}

    @pytest.mark.asyncio
    async def test_query_param_from_settings(self):
        from datastar_sse.config import Settings

        settings = Settings(_env_file=None, signals_query_param="ds")
        sse = ServerSentEventGenerator(get_request('{"x":1}', param="ds"), settings=settings)
        assert await sse.read_signals() == {"x": 1}
