"""Health check endpoint for the semantics service."""

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable


class HealthHandler(BaseHTTPRequestHandler):
    """HTTP handler for health check endpoint."""

    check_func: Callable[[], dict[str, Any]] | None = None

    def do_GET(self) -> None:
        """Handle GET requests."""
        if self.path == "/health":
            self._handle_health()
        elif self.path == "/ready":
            self._handle_ready()
        elif self.path == "/live":
            self.send_response(200)
            self.end_headers()
        else:
            self.send_response(404)
            self.end_headers()

    def _handle_health(self) -> None:
        health = self.check_func() if self.check_func else {"status": "unknown"}
        status_code = 200 if health.get("status") == "healthy" else 503

        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(health).encode())

    def _handle_ready(self) -> None:
        """Ready once the metadata cache has done its initial scan."""
        ready = bool(self.check_func and self.check_func().get("cache_started", False))
        self.send_response(200 if ready else 503)
        self.end_headers()

    def log_message(self, format: str, *args: Any) -> None:
        """Suppress request logging."""
        pass


class HealthServer:
    """HTTP server for health checks."""

    def __init__(
        self,
        port: int = 8080,
        check_func: Callable[[], dict[str, Any]] | None = None,
    ):
        """Initialize the health server.

        Args:
            port: Port to listen on.
            check_func: Function that returns health status dict.
        """
        self.port = port
        self._check_func = check_func
        self._server: HTTPServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the health server in a background thread."""

        class Handler(HealthHandler):
            check_func = self._check_func

        self._server = HTTPServer(("0.0.0.0", self.port), Handler)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the health server."""
        if self._server:
            self._server.shutdown()


def create_health_checker(cache: Any, items: Any) -> Callable[[], dict[str, Any]]:
    """Create a health check function.

    Args:
        cache: The metadata cache (needs ``is_started`` and ``size``).
        items: The item registry (needs ``__len__``).

    Returns:
        Function that returns health status dict.
    """

    def check() -> dict[str, Any]:
        started = cache.is_started
        return {
            "status": "healthy" if started else "starting",
            "timestamp": int(time.time() * 1000),
            "cache_started": started,
            "metadata_records": cache.size,
            "items": len(items),
        }

    return check
