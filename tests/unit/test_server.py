"""Tests for the demo server."""

import json
from unittest.mock import MagicMock
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from datastar_sse.config import Settings
from datastar_sse.server import DatastarDemoServer, DemoStore, create_app, homepage


def data_lines(body: str) -> list[str]:
    return [line[len("data: "):] for line in body.split("\n") if line.startswith("data: ")]


@pytest.fixture
def store() -> DemoStore:
    return DemoStore({"someBackendValue": "This is something"})


@pytest.fixture
def server(settings: Settings, store: DemoStore) -> DatastarDemoServer:
    return DatastarDemoServer(settings, store)


@pytest.fixture
def client(server: DatastarDemoServer) -> TestClient:
    return TestClient(server.app)


class TestPages:
    """Test non-streaming routes."""

    def test_homepage(self, client: TestClient, settings: Settings):
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert settings.datastar_script_url in response.text
        assert "@get('/clock')" in response.text

    def test_homepage_name(self):
        assert "<title>Demo Datastar Test</title>" in homepage("Demo", "x.js")

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy", "version": "0.1.0"}

    def test_create_app(self, settings: Settings):
        app = create_app(settings)
        paths = {route.path for route in app.routes}
        assert {"/", "/clock", "/quote", "/readSignals", "/removeSignal"} <= paths

    @pytest.mark.parametrize("debug", [True, False])
    def test_debug_setting(self, debug: bool):
        """Test the debug setting switches FastAPI debug mode."""
        server = DatastarDemoServer(Settings(_env_file=None, debug=debug))
        assert server.app.debug is debug


class TestCommandRoutes:
    """Test routes that send a fixed set of events."""

    def test_quote(self, client: TestClient):
        response = client.get("/quote")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert "event: datastar-merge-fragments\n" in response.text
        assert "event: datastar-merge-signals\n" in response.text
        lines = data_lines(response.text)
        assert lines[2].startswith('fragments <div id="quote">')
        assert lines[3].startswith('signals {"lastUpdate":')

    def test_remove_trash(self, client: TestClient):
        response = client.get("/removeTrash")
        assert data_lines(response.text)[0] == "selector #trash"

    def test_print_to_console(self, client: TestClient):
        response = client.get("/printToConsole")
        assert data_lines(response.text)[0] == (
            "script console.log(\"Hello from the backend!\"); "
            "console.log('second console.log on new line');"
        )

    def test_remove_signal(self, client: TestClient):
        response = client.get("/removeSignal")
        assert "event: datastar-remove-signals\n" in response.text
        assert data_lines(response.text) == ["paths xyz"]


class TestReadSignalsRoute:
    """Test /readSignals."""

    def test_get(self, client: TestClient, store: DemoStore):
        payload = quote(json.dumps({"theme": "dark"}))
        response = client.get(f"/readSignals?datastar={payload}")

        assert response.status_code == 200
        assert store.signals == {"someBackendValue": "This is something", "theme": "dark"}

    def test_post(self, client: TestClient, store: DemoStore):
        response = client.post("/readSignals", json={"someBackendValue": "new", "xyz": 1})

        assert response.status_code == 200
        assert store.signals == {"someBackendValue": "new", "xyz": 1}

    def test_missing_query_param(self, client: TestClient, store: DemoStore):
        response = client.get("/readSignals")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "SignalParseError"
        assert body["code"] == "DS-3001"
        assert store.signals == {"someBackendValue": "This is something"}

    def test_malformed_body(self, client: TestClient):
        response = client.post(
            "/readSignals",
            content=b"{broken",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "DS-3002"


class TestClockRoute:
    """Test the long-lived /clock stream."""

    @pytest.mark.asyncio
    async def test_pushes_fragments(self):
        settings = Settings(_env_file=None, clock_interval=0.01)
        server = DatastarDemoServer(settings)
        endpoint = next(r.endpoint for r in server.app.routes if getattr(r, "path", None) == "/clock")

        response = await endpoint(MagicMock())
        events = []
        async for event in response.body_iterator:
            events.append(event)
            if len(events) == 2:
                break
        await response.body_iterator.aclose()

        assert response.headers["cache-control"] == "no-cache"
        for event in events:
            assert "event: datastar-merge-fragments\n" in event
            assert 'data: fragments <div id="clock">' in event


class TestDemoStore:
    """Test DemoStore."""

    def test_default_signals(self):
        assert DemoStore().signals == {"someBackendValue": "This is something"}

    def test_stores_are_independent(self):
        first, second = DemoStore(), DemoStore()
        first.signals["x"] = 1
        assert "x" not in second.signals
