"""Shared pytest fixtures."""

import pytest

from datastar_sse.config import Settings
from datastar_sse.protocol import ServerSentEventGenerator
from tests.fixtures import MockResponse


@pytest.fixture
def settings() -> Settings:
    """Settings with library defaults, independent of the environment."""
    return Settings(_env_file=None, env="development", default_retry_duration=1000)


@pytest.fixture
def response() -> MockResponse:
    return MockResponse()


@pytest.fixture
def sse(response: MockResponse, settings: Settings) -> ServerSentEventGenerator:
    """Generator bound to a recording response."""
    return ServerSentEventGenerator(None, response, settings=settings)
