"""
Dev server for sitepipe.

Serves the project root over HTTP and pushes live-reload messages to
connected browsers over a WebSocket on the next port up. HTML responses
get a small client script injected that listens on that socket.
"""

from __future__ import annotations

import asyncio
import functools
import json
import threading
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional

import websockets
from websockets.asyncio.server import serve as ws_serve, ServerConnection

from sitepipe.build.config import DEFAULT_PORT
from sitepipe.core.utils import log, plural


# =============================================================================
# Injected Client Script
# =============================================================================

# The WebSocket port placeholder is replaced at runtime via str.replace().
LIVE_RELOAD_SCRIPT = """
<script>
(function() {
  var wsPort = __SITEPIPE_WS_PORT__;
  var reconnectDelay = 500;
  var maxReconnectDelay = 5000;

  function reloadCSS(filename) {
    var links = document.querySelectorAll('link[rel="stylesheet"]');
    var stamp = '?t=' + Date.now();
    for (var i = 0; i < links.length; i++) {
      var href = links[i].getAttribute('href');
      if (!href) continue;
      var base = href.split('?')[0];
      if (!filename || base.indexOf(filename) !== -1) {
        links[i].setAttribute('href', base + stamp);
      }
    }
  }

  function connect() {
    var ws;
    try {
      ws = new WebSocket('ws://' + location.hostname + ':' + wsPort + '/ws');
    } catch (e) {
      scheduleReconnect();
      return;
    }

    ws.onopen = function() {
      reconnectDelay = 500;
      console.log('[sitepipe] Live reload connected');
    };

    ws.onmessage = function(event) {
      var msg;
      try {
        msg = JSON.parse(event.data);
      } catch (e) {
        return;
      }
      if (msg.type === 'css-reload') {
        reloadCSS(msg.file || null);
      } else if (msg.type === 'reload') {
        location.reload();
      }
    };

    ws.onclose = scheduleReconnect;
    ws.onerror = function() { ws.close(); };
  }

  function scheduleReconnect() {
    setTimeout(function() {
      reconnectDelay = Math.min(reconnectDelay * 1.5, maxReconnectDelay);
      connect();
    }, reconnectDelay);
  }

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', connect);
  } else {
    connect();
  }
})();
</script>
"""


def inject_reload_script(html: str, ws_port: int) -> str:
    """Insert the live-reload client before </body> (or </html>, or at the end)."""
    script = LIVE_RELOAD_SCRIPT.replace("__SITEPIPE_WS_PORT__", str(ws_port))
    if "</body>" in html:
        return html.replace("</body>", script + "\n</body>", 1)
    if "</html>" in html:
        return html.replace("</html>", script + "\n</html>", 1)
    return html + script


# =============================================================================
# Script-Injecting HTTP Handler
# =============================================================================


class InjectingHandler(SimpleHTTPRequestHandler):
    """HTTP handler that injects the live reload script into HTML responses."""

    quiet: bool = True

    def __init__(self, *args, directory: str | None = None, ws_port: int = DEFAULT_PORT + 1, **kwargs):
        # Must be set before super().__init__, which handles the request
        self.ws_port = ws_port
        super().__init__(*args, directory=directory, **kwargs)

    def log_message(self, format, *args):
        """Suppress default HTTP logging unless verbose."""
        if not self.quiet:
            super().log_message(format, *args)

    def end_headers(self):
        # Prevent caching during dev
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def do_GET(self):
        """Serve files, injecting reload script into HTML."""
        f_path = Path(self.translate_path(self.path))

        if f_path.is_dir():
            index = f_path / "index.html"
            if index.exists():
                f_path = index

        if f_path.is_file() and f_path.suffix in (".html", ".htm"):
            try:
                content = f_path.read_bytes().decode("utf-8", errors="replace")
            except OSError as e:
                log.warning(f"Could not read {f_path}: {e}")
            else:
                encoded = inject_reload_script(content, self.ws_port).encode("utf-8")
                self.send_response(HTTPStatus.OK)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.send_header("Content-Length", str(len(encoded)))
                self.end_headers()
                self.wfile.write(encoded)
                return

        super().do_GET()


# =============================================================================
# WebSocket Broadcast Server
# =============================================================================


class ReloadBroadcaster:
    """Live-reload channel: a WebSocket server that fans out reload messages.

    Owns its asyncio loop on a background thread between start() and
    stop(). broadcast() is thread-safe and does nothing while stopped.
    """

    def __init__(self, port: int = DEFAULT_PORT + 1, host: str = "localhost"):
        self.port = port
        self.host = host
        self._clients: set[ServerConnection] = set()
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._startup_error: Optional[BaseException] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self, timeout: float = 5.0) -> None:
        """Start serving. Raises OSError if the port cannot be bound, or
        TimeoutError if the server is not up within timeout seconds."""
        if self._running:
            return

        self._startup_error = None
        self._loop = asyncio.new_event_loop()
        ready = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(ready,), daemon=True)
        self._thread.start()
        started = ready.wait(timeout)

        if self._startup_error is not None:
            raise self._startup_error
        if not started:
            self.stop()
            raise TimeoutError(f"live reload server did not start within {timeout}s")

    def stop(self, timeout: float = 5.0) -> None:
        """Close all connections and stop the loop thread."""
        loop, stop_event = self._loop, self._stop_event
        if loop is not None and stop_event is not None and not loop.is_closed():
            loop.call_soon_threadsafe(stop_event.set)
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None
        self._loop = None
        self._stop_event = None

    def _run(self, ready: threading.Event) -> None:
        assert self._loop is not None
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self._serve(ready))
        finally:
            self._loop.close()

    async def _serve(self, ready: threading.Event) -> None:
        self._stop_event = asyncio.Event()
        try:
            async with ws_serve(
                self.handler,
                self.host,
                self.port,
                process_request=_ws_process_request,
            ):
                self._running = True
                ready.set()
                await self._stop_event.wait()
        except OSError as e:
            self._startup_error = e
        finally:
            self._running = False
            ready.set()

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    async def handler(self, websocket: ServerConnection) -> None:
        """Handle a new WebSocket connection."""
        with self._lock:
            self._clients.add(websocket)
        log.info(f"Browser connected ({plural(self.client_count, 'client')})")

        try:
            # Keep connection alive, handle pings automatically
            async for _ in websocket:
                pass  # We don't expect messages from clients
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            with self._lock:
                self._clients.discard(websocket)
            log.info(f"Browser disconnected ({plural(self.client_count, 'client')})")

    def broadcast(self, message: dict) -> None:
        """Broadcast a message to all connected clients.

        Thread-safe: can be called from task or watchdog threads.
        """
        loop = self._loop
        if not self._running or loop is None:
            return

        with self._lock:
            clients = set(self._clients)

        if not clients:
            return

        data = json.dumps(message)

        async def _send_all():
            await asyncio.gather(*(self._safe_send(client, data) for client in clients))

        asyncio.run_coroutine_threadsafe(_send_all(), loop)

    @staticmethod
    async def _safe_send(client: ServerConnection, data: str) -> None:
        try:
            await client.send(data)
        except websockets.exceptions.ConnectionClosed:
            pass  # Cleaned up in handler

    def notify_reload(self) -> None:
        """Send a full page reload message."""
        self.broadcast({"type": "reload"})

    def notify_css_reload(self, filename: Optional[str] = None) -> None:
        """Send a CSS-only reload message."""
        msg: dict = {"type": "css-reload"}
        if filename:
            msg["file"] = filename
        self.broadcast(msg)


async def _ws_process_request(connection, request):
    """Only accept WebSocket connections on /ws path."""
    if request.path != "/ws":
        return connection.respond(HTTPStatus.NOT_FOUND, "Not found\n")
    return None


# =============================================================================
# Dev Server
# =============================================================================


class DevServer:
    """Static HTTP server plus its live-reload channel."""

    def __init__(self, root: Path, port: int = DEFAULT_PORT, host: str = "localhost"):
        self.root = root
        self.port = port
        self.host = host
        self.broadcaster = ReloadBroadcaster(port=port + 1, host=host)
        self._httpd: Optional[ThreadingHTTPServer] = None
        self._http_thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Bind both servers. Raises OSError if a port is taken."""
        handler_factory = functools.partial(
            InjectingHandler,
            directory=str(self.root),
            ws_port=self.broadcaster.port,
        )
        self._httpd = ThreadingHTTPServer((self.host, self.port), handler_factory)
        self._http_thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)
        self._http_thread.start()

        try:
            self.broadcaster.start()
        except OSError:
            self._stop_http()
            raise

        log.success(f"HTTP server: {self.url}")
        log.success(f"Live reload: ws://{self.host}:{self.broadcaster.port}/ws")

    def stop(self) -> None:
        self.broadcaster.stop()
        self._stop_http()

    def _stop_http(self) -> None:
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None
        if self._http_thread is not None:
            self._http_thread.join(timeout=5)
            self._http_thread = None
