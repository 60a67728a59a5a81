"""HTTP server adapter for health endpoints.

Provides a simple HTTP server using Python's built-in http.server module
and asyncio, exposing liveness and readiness checks as JSON:

- GET /health/live: always 200 while the process runs
- GET /health/ready: 200 when the store is reachable, 503 otherwise
- GET /: service banner
"""

import asyncio
import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

from ideahub.core.health import HealthService
from ideahub.core.models import HealthReport

logger = logging.getLogger(__name__)

READINESS_TIMEOUT_SECONDS = 10


def _report_body(report: HealthReport) -> dict[str, Any]:
    body: dict[str, Any] = {
        "check": report.name,
        "status": "healthy" if report.healthy else "unhealthy",
    }
    if report.detail:
        body["detail"] = report.detail
    if report.checked_at is not None:
        body["checked_at"] = report.checked_at.isoformat()
    return body


def make_health_handler(
    health: HealthService,
    event_loop: asyncio.AbstractEventLoop,
) -> type[BaseHTTPRequestHandler]:
    """Factory to create a HealthHTTPHandler class with instance-specific state.

    Args:
        health: HealthService answering the checks
        event_loop: Event loop the async readiness check runs on

    Returns:
        A HealthHTTPHandler class configured with the provided dependencies
    """

    class HealthHTTPHandler(BaseHTTPRequestHandler):
        """HTTP request handler for health endpoints."""

        def do_GET(self) -> None:
            if self.path == "/health/live":
                report = health.liveness()
                self._send_response(_report_body(report), 200)
            elif self.path == "/health/ready":
                self._handle_ready()
            elif self.path == "/":
                self._send_response({"service": "ideahub", "status": "running"}, 200)
            else:
                self.send_error(404, "Not found")

        def _handle_ready(self) -> None:
            """Run the async readiness check on the server's event loop."""
            future = asyncio.run_coroutine_threadsafe(health.readiness(), event_loop)
            try:
                report = future.result(timeout=READINESS_TIMEOUT_SECONDS)
            except Exception as e:
                logger.error(f"Error handling readiness request: {e}", exc_info=True)
                self._send_response(
                    {"check": "readiness", "status": "unhealthy"}, 503
                )
                return

            self._send_response(_report_body(report), 200 if report.healthy else 503)

        def _send_response(self, data: dict[str, Any], status_code: int) -> None:
            """Send JSON response."""
            self.send_response(status_code)
            self.send_header("Content-Type", "application/json")
            self.end_headers()
            self.wfile.write(json.dumps(data).encode())

        def log_message(self, format: str, *args: Any) -> None:
            """Log HTTP request."""
            logger.debug(f"HTTP {self.client_address[0]}: {format % args}")

    return HealthHTTPHandler


class HealthHTTPServer:
    """Health endpoint HTTP server adapter."""

    def __init__(
        self,
        health: HealthService,
        host: str = "0.0.0.0",
        port: int = 8080,
    ):
        """Initialize the HTTP server.

        Args:
            health: HealthService answering the checks.
            host: Host to listen on (default 0.0.0.0).
            port: Port to listen on (default 8080). 0 picks a free port.
        """
        self.health = health
        self.host = host
        self.port = port
        self.server: HTTPServer | None = None
        self._server_task: asyncio.Task[None] | None = None

    @property
    def bound_port(self) -> int | None:
        """Port actually bound, once started."""
        if self.server is None:
            return None
        return self.server.server_address[1]

    async def start(self) -> None:
        """Start the HTTP server."""
        logger.info(f"Starting health HTTP server on {self.host}:{self.port}")

        handler_class = make_health_handler(
            health=self.health,
            event_loop=asyncio.get_running_loop(),
        )
        self.server = HTTPServer((self.host, self.port), handler_class)

        self._server_task = asyncio.create_task(self._run_server())
        logger.info(f"Health HTTP server listening on port {self.bound_port}")

    async def _run_server(self) -> None:
        """Run the HTTP server loop in a thread pool."""
        if not self.server:
            return

        try:
            await asyncio.to_thread(self.server.serve_forever)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Health HTTP server error: {e}", exc_info=True)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.server:
            await asyncio.to_thread(self.server.shutdown)
            self.server.server_close()
        if self._server_task:
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        logger.info("Health HTTP server stopped")
