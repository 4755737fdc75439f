"""Demo server showing every Datastar command over FastAPI."""

import asyncio
import random
import time
from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.responses import StreamingResponse

from datastar_sse.config import Settings, get_settings
from datastar_sse.errors import DatastarError, format_error, status_code_for
from datastar_sse.logging import get_logger
from datastar_sse.protocol import ServerSentEventGenerator
from datastar_sse.transport import StreamResponse, sse_response

logger = get_logger(__name__)

QUOTES = [
    "Any app that can be written in JavaScript, will eventually be written in JavaScript. - Jeff Atwood",
    "JavaScript is the world's most misunderstood programming language. - Douglas Crockford",
    "The strength of JavaScript is that you can do anything. The weakness is that you will. - Reg Braithwaite",
]

CONSOLE_SCRIPT = """console.log("Hello from the backend!"); //My comment
  //What about this?
  console.log('second console.log on new line');"""


class DemoStore:
    """Backend state shared by the demo handlers of one server instance."""

    def __init__(self, signals: dict[str, Any] | None = None):
        self.signals: dict[str, Any] = signals or {"someBackendValue": "This is something"}
        self._lock = asyncio.Lock()

    async def merge_from(self, sse: ServerSentEventGenerator) -> dict[str, Any]:
        """Replace the stored signals with the request's signals merged over them."""
        async with self._lock:
            self.signals = await sse.read_signals(self.signals)
            return dict(self.signals)


def homepage(name: str = "", script_url: str = "") -> str:
    """Render the demo page."""
    return f"""<html>
  <head>
    <title>{name} Datastar Test</title>
    <script type="module" src="{script_url}"></script>
  </head>
  <body>
    <h3>{name} Datastar Test</h3>
    <div data-signals="{{theme: 'light', lastUpdate:'Never', xyz:'some signal'}}">
      <h3>Long Lived SSE:</h3>
      <div id="clock" data-on-load="@get('/clock')">...Loading Clock</div>

      <h3>MergeSignals:</h3>
      <div>Last User Interaction:<span data-text="$lastUpdate"></span></div>
      <h3>Merge Fragments</h3>
      <div id="quote">No Quote</div>
      <button data-on-click="@get('/quote')">MergeFragments</button>
      <h3>RemoveFragments</h3>
      <div id="trash">
        Remove me please!
        <button data-on-click="@get('/removeTrash')">RemoveFragments</button>
      </div>
      <h3>ExecuteScript</h3>
      <div>Print to Console</div>
      <button data-on-click="@get('/printToConsole')">ExecuteScript</button>

      <h3>ReadSignals</h3>
      <button data-on-click="@get('/readSignals')">ReadSignals</button>

      <h3>ReadSignals (post)</h3>
      <button data-on-click="@post('/readSignals')">ReadSignals (post)</button>

      <h3>RemoveSignals</h3>
      <div>Signal xyz:<span data-text="$xyz"></span></div>
      <button data-on-click="@get('/removeSignal')">Test RemoveSignals: xyz</button>
    </div>
  </body>
</html>"""


def _now_ms() -> int:
    return int(time.time() * 1000)


class DatastarDemoServer:
    """FastAPI application exercising every Datastar command.

    Example:
        ```python
        from datastar_sse.server import DatastarDemoServer

        server = DatastarDemoServer()
        await server.run(host="0.0.0.0", port=8000)
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: DemoStore | None = None,
        name: str = "FastAPI",
    ):
        """Initialize demo server.

        Args:
            settings: Settings instance (defaults to the global settings)
            store: Backend state for /readSignals
            name: Name shown on the demo page
        """
        self.settings = settings or get_settings()
        self.store = store or DemoStore()
        self.name = name

        self.app = FastAPI(
            title="Datastar SSE Demo",
            description="Server-sent Datastar commands",
            version="0.1.0",
            debug=self.settings.debug,
        )

        self._setup_exception_handlers()
        self._setup_routes()

    def _generator(self, request: Request, stream: StreamResponse | None = None) -> ServerSentEventGenerator:
        return ServerSentEventGenerator(request, stream, settings=self.settings)

    def _setup_exception_handlers(self):
        @self.app.exception_handler(DatastarError)
        async def datastar_error_handler(request: Request, exc: DatastarError):
            logger.warning(
                "Request failed",
                path=request.url.path,
                code=str(exc.code),
                error=exc.message,
            )
            return JSONResponse(status_code=status_code_for(exc), content=format_error(exc))

    def _setup_routes(self):
        """Setup FastAPI routes for the demo."""

        @self.app.get("/", response_class=HTMLResponse)
        async def index():
            return homepage(self.name, self.settings.datastar_script_url)

        @self.app.get("/clock")
        async def clock(request: Request) -> StreamingResponse:
            """Long-lived stream pushing the current time until the client leaves."""
            sse = self._generator(request)

            async def ticks() -> AsyncIterator[str]:
                while True:
                    yield sse.merge_fragments(f'<div id="clock">{datetime.now().ctime()}</div>')
                    await asyncio.sleep(self.settings.clock_interval)

            return sse_response(sse, ticks())

        @self.app.get("/quote")
        async def quote(request: Request) -> StreamingResponse:
            stream = StreamResponse()
            sse = self._generator(request, stream)
            sse.merge_fragments(f'<div id="quote">{random.choice(QUOTES)}</div>')
            sse.merge_signals({"lastUpdate": _now_ms()})
            stream.close()
            return sse_response(sse, stream)

        @self.app.get("/removeTrash")
        async def remove_trash(request: Request) -> StreamingResponse:
            stream = StreamResponse()
            sse = self._generator(request, stream)
            sse.remove_fragments("#trash")
            sse.merge_signals({"lastUpdate": _now_ms()})
            stream.close()
            return sse_response(sse, stream)

        @self.app.get("/printToConsole")
        async def print_to_console(request: Request) -> StreamingResponse:
            stream = StreamResponse()
            sse = self._generator(request, stream)
            sse.execute_script(CONSOLE_SCRIPT)
            sse.merge_signals({"lastUpdate": _now_ms()})
            stream.close()
            return sse_response(sse, stream)

        @self.app.api_route("/readSignals", methods=["GET", "POST"])
        async def read_signals(request: Request) -> StreamingResponse:
            stream = StreamResponse()
            sse = self._generator(request, stream)
            signals = await self.store.merge_from(sse)
            logger.info("Backend store updated", method=request.method, keys=sorted(signals))
            stream.close()
            return sse_response(sse, stream)

        @self.app.get("/removeSignal")
        async def remove_signal(request: Request) -> StreamingResponse:
            stream = StreamResponse()
            sse = self._generator(request, stream)
            sse.remove_signals(["xyz"])
            stream.close()
            return sse_response(sse, stream)

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "version": "0.1.0"}

    async def run(self, host: str | None = None, port: int | None = None):
        """Run the demo server.

        Args:
            host: Host to bind to (defaults to settings.http_host)
            port: Port to listen on (defaults to settings.http_port)
        """
        import uvicorn

        host = host or self.settings.http_host
        port = port or self.settings.http_port
        logger.info("Starting Datastar demo server", host=host, port=port)

        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level=self.settings.log_level.lower(),
        )
        server = uvicorn.Server(config)

        try:
            await server.serve()
        except Exception as e:
            logger.error("Datastar demo server error", error=str(e))
            raise


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory for ``uvicorn --factory``."""
    return DatastarDemoServer(settings).app
