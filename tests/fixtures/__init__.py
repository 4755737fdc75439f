"""Test fixtures and factories."""

from tests.fixtures.mocks import (
    MockJSONRequest,
    MockRequest,
    MockResponse,
    MockStreamRequest,
    create_mock_response,
    create_write_only_response,
)

__all__ = [
    "MockJSONRequest",
    "MockRequest",
    "MockResponse",
    "MockStreamRequest",
    "create_mock_response",
    "create_write_only_response",
]
