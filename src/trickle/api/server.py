"""HTTP API for Trickle.

Endpoints:
- POST /api/drip: Drip tokens to ``{"recipient": "0x..."}``
- GET /health: Liveness probe
- GET /ready: Readiness probe
- GET /metrics: Prometheus metrics
"""

import logging
import uuid

from aiohttp import web
from prometheus_client import REGISTRY, generate_latest

from trickle.faucet.coordinator import DripCoordinator, DripRequest, InvalidDripRequest
from trickle.faucet.outcome import invalid_input
from trickle.observability.health import HealthCheck, HealthStatus, run_checks
from trickle.observability.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
INVALID_JSON_MESSAGE = "Invalid JSON body"


@web.middleware
async def request_id_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Bind a request ID to the log context and echo it in the response."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    set_request_id(request_id)
    try:
        response = await handler(request)
    finally:
        clear_request_id()
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


class DripServer:
    """HTTP server for the drip endpoint and its probes.

    Parameters
    ----------
    coordinator : DripCoordinator
        Coordinator that serves drip requests.
    host : str
        Host to bind to.
    port : int
        Port to bind to.
    """

    def __init__(
        self,
        coordinator: DripCoordinator,
        host: str = "0.0.0.0",  # noqa: S104
        port: int = 8080,
    ):
        self._coordinator = coordinator
        self._host = host
        self._port = port
        self._checks: list[HealthCheck] = []
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    def add_check(self, check: HealthCheck) -> None:
        """Add a readiness check."""
        self._checks.append(check)

    def create_app(self) -> web.Application:
        """Build the aiohttp application with all routes."""
        app = web.Application(middlewares=[request_id_middleware])
        app.router.add_post("/api/drip", self._handle_drip)
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/ready", self._handle_ready)
        app.router.add_get("/metrics", self._handle_metrics)
        return app

    async def start(self) -> None:
        """Start serving."""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        logger.info(
            "Drip server started",
            extra={"host": self._host, "port": self._port},
        )

    async def stop(self) -> None:
        """Stop serving."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("Drip server stopped")

    async def _handle_drip(self, request: web.Request) -> web.Response:
        """Handle POST /api/drip."""
        try:
            payload = await request.json()
        except ValueError:
            # Covers JSONDecodeError and bodies that are not valid UTF-8.
            return web.json_response({"error": INVALID_JSON_MESSAGE}, status=400)

        try:
            drip_request = DripRequest.from_payload(payload)
        except InvalidDripRequest as e:
            outcome = invalid_input(str(e))
        else:
            outcome = await self._coordinator.handle_drip(drip_request)

        status, body = outcome.to_response()
        return web.json_response(body, status=status)

    async def _handle_health(self, _request: web.Request) -> web.Response:
        """Handle GET /health (liveness probe)."""
        return web.json_response({"status": "ok"})

    async def _handle_ready(self, _request: web.Request) -> web.Response:
        """Handle GET /ready (readiness probe)."""
        result = await run_checks(self._checks)
        status_code = 200 if result.status == HealthStatus.OK else 503
        return web.json_response(result.to_dict(), status=status_code)

    async def _handle_metrics(self, _request: web.Request) -> web.Response:
        """Handle GET /metrics (Prometheus)."""
        return web.Response(
            body=generate_latest(REGISTRY),
            content_type="text/plain",
            charset="utf-8",
        )
