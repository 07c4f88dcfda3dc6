"""Tests for the HTTP API."""

from unittest.mock import MagicMock

import pytest
from aiohttp.test_utils import TestClient, TestServer

from trickle.api.server import INVALID_JSON_MESSAGE, REQUEST_ID_HEADER, DripServer
from trickle.blockchain.client import DripReceipt, FaucetContract, PendingDrip
from trickle.config import TrickleConfig
from trickle.faucet.coordinator import DripCoordinator
from trickle.faucet.outcome import (
    CONFIGURATION_ERROR_MESSAGE,
    INSUFFICIENT_BALANCE_MESSAGE,
    INVALID_ADDRESS_MESSAGE,
    RECIPIENT_REQUIRED_MESSAGE,
)
from trickle.observability.health import CheckResult, HealthCheck, HealthStatus

TEST_PRIVATE_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
FAUCET_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
RECIPIENT = "0x742d35cc6634c0532925a3b844bc9e7595f8fe00"
TX_HASH = "0x" + "cd" * 32


class StubCheck(HealthCheck):
    """Readiness check with a fixed result."""

    def __init__(self, name: str, status: HealthStatus, message: str | None = None):
        self._name = name
        self._status = status
        self._message = message

    @property
    def name(self) -> str:
        return self._name

    async def check(self) -> CheckResult:
        return CheckResult(name=self._name, status=self._status, message=self._message)


@pytest.fixture
def faucet():
    """Mock faucet contract that allows drips."""
    pending = MagicMock(spec=PendingDrip)
    pending.tx_hash = TX_HASH
    pending.wait.return_value = DripReceipt(tx_hash=TX_HASH, block_number=99)

    client = MagicMock(spec=FaucetContract)
    client.can_drip.return_value = True
    client.drip.return_value = pending
    return client


@pytest.fixture
def configured(monkeypatch):
    """Set every drip setting."""
    monkeypatch.setenv("TRICKLE_RPC_ENDPOINT", "http://localhost:8545")
    monkeypatch.setenv("TRICKLE_FAUCET_CONTRACT_ADDRESS", FAUCET_ADDRESS)
    monkeypatch.setenv("TRICKLE_WALLET_PRIVATE_KEY", TEST_PRIVATE_KEY)


@pytest.fixture
def drip_server(configured, faucet):
    """DripServer with a coordinator wired to the mock faucet."""
    coordinator = DripCoordinator(TrickleConfig(), client_factory=lambda _config: faucet)
    return DripServer(coordinator)


@pytest.fixture
async def app_client(drip_server):
    """Test client for the server's application."""
    client = TestClient(TestServer(drip_server.create_app()))
    await client.start_server()
    yield client
    await client.close()


class TestDripEndpoint:
    """Tests for POST /api/drip."""

    @pytest.mark.asyncio
    async def test_success(self, app_client, faucet):
        """Eligible recipient gets 200 with the transaction."""
        resp = await app_client.post("/api/drip", json={"recipient": RECIPIENT})

        assert resp.status == 200
        assert await resp.json() == {
            "success": True,
            "txHash": TX_HASH,
            "blockNumber": 99,
            "message": "Tokens sent successfully!",
        }
        faucet.drip.assert_called_once_with(RECIPIENT)

    @pytest.mark.asyncio
    async def test_missing_recipient(self, app_client, faucet):
        """Missing recipient is a 400."""
        resp = await app_client.post("/api/drip", json={})

        assert resp.status == 400
        assert await resp.json() == {"error": RECIPIENT_REQUIRED_MESSAGE}
        faucet.can_drip.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_string_recipient(self, app_client):
        """A numeric recipient is a 400."""
        resp = await app_client.post("/api/drip", json={"recipient": 12345})

        assert resp.status == 400
        assert await resp.json() == {"error": RECIPIENT_REQUIRED_MESSAGE}

    @pytest.mark.asyncio
    async def test_invalid_address(self, app_client, faucet):
        """Malformed address is a 400."""
        resp = await app_client.post("/api/drip", json={"recipient": "0xdeadbeef"})

        assert resp.status == 400
        assert await resp.json() == {"error": INVALID_ADDRESS_MESSAGE}
        faucet.can_drip.assert_not_called()

    @pytest.mark.asyncio
    async def test_bad_checksum_address(self, app_client, faucet):
        """A mixed-case address with a wrong checksum is a 400 and never dripped."""
        resp = await app_client.post(
            "/api/drip", json={"recipient": "0xD8dA6BF26964aF9D7eEd9e03E53415D37aA96045"}
        )

        assert resp.status == 400
        assert await resp.json() == {"error": INVALID_ADDRESS_MESSAGE}
        faucet.can_drip.assert_not_called()
        faucet.drip.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_json(self, app_client):
        """A body that is not JSON is a 400."""
        resp = await app_client.post(
            "/api/drip",
            data="recipient=0xabc",
            headers={"Content-Type": "application/json"},
        )

        assert resp.status == 400
        assert await resp.json() == {"error": INVALID_JSON_MESSAGE}

    @pytest.mark.asyncio
    async def test_body_not_utf8(self, app_client, faucet):
        """A body with invalid UTF-8 bytes is a JSON 400, not a server error."""
        resp = await app_client.post(
            "/api/drip",
            data=b'{"recipient": "\xff\xfe"}',
            headers={"Content-Type": "application/json"},
        )

        assert resp.status == 400
        assert resp.content_type == "application/json"
        assert await resp.json() == {"error": INVALID_JSON_MESSAGE}
        faucet.can_drip.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_fields(self, app_client, faucet):
        """Fields other than recipient are rejected."""
        resp = await app_client.post("/api/drip", json={"recipient": RECIPIENT, "amount": 5})

        assert resp.status == 400
        assert "amount" in (await resp.json())["error"]
        faucet.can_drip.assert_not_called()

    @pytest.mark.asyncio
    async def test_cooldown(self, app_client, faucet):
        """Cooldown is a 429 with the wait time."""
        faucet.can_drip.return_value = False
        faucet.get_remaining_cooldown.return_value = 3599

        resp = await app_client.post("/api/drip", json={"recipient": RECIPIENT})

        assert resp.status == 429
        assert await resp.json() == {"error": "Please wait 60 minutes before requesting again"}

    @pytest.mark.asyncio
    async def test_insufficient_funds(self, app_client, faucet):
        """Insufficient funds is a 500 with the administrator message."""
        faucet.drip.side_effect = ValueError("insufficient funds for gas * price + value")

        resp = await app_client.post("/api/drip", json={"recipient": RECIPIENT})

        assert resp.status == 500
        assert await resp.json() == {"error": INSUFFICIENT_BALANCE_MESSAGE}

    @pytest.mark.asyncio
    async def test_get_not_allowed(self, app_client):
        """Only POST is routed."""
        resp = await app_client.get("/api/drip")

        assert resp.status == 405


class TestUnconfiguredServer:
    """The server keeps running without drip settings."""

    @pytest.mark.asyncio
    async def test_drip_fails_closed(self):
        """Every valid drip is a generic 500."""
        factory = MagicMock()
        server = DripServer(DripCoordinator(TrickleConfig(), client_factory=factory))
        client = TestClient(TestServer(server.create_app()))
        await client.start_server()
        try:
            resp = await client.post("/api/drip", json={"recipient": RECIPIENT})

            assert resp.status == 500
            assert await resp.json() == {"error": CONFIGURATION_ERROR_MESSAGE}
            factory.assert_not_called()
        finally:
            await client.close()


class TestRequestId:
    """Tests for request ID propagation."""

    @pytest.mark.asyncio
    async def test_generates_request_id(self, app_client):
        """A request ID is generated when none is sent."""
        resp = await app_client.get("/health")

        assert len(resp.headers[REQUEST_ID_HEADER]) == 32

    @pytest.mark.asyncio
    async def test_echoes_request_id(self, app_client):
        """A client request ID is echoed back."""
        resp = await app_client.get("/health", headers={REQUEST_ID_HEADER: "req-123"})

        assert resp.headers[REQUEST_ID_HEADER] == "req-123"


class TestProbeEndpoints:
    """Tests for /health, /ready and /metrics."""

    @pytest.mark.asyncio
    async def test_health(self, app_client):
        """GET /health returns 200 OK."""
        resp = await app_client.get("/health")

        assert resp.status == 200
        assert await resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_ready_no_checks(self, app_client):
        """GET /ready returns 200 when no checks are configured."""
        resp = await app_client.get("/ready")

        assert resp.status == 200
        assert await resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_ready_check_fails(self, drip_server):
        """GET /ready returns 503 when a check fails."""
        drip_server.add_check(StubCheck("configuration", HealthStatus.OK))
        drip_server.add_check(StubCheck("faucet", HealthStatus.ERROR, "balance 0 below drip amount 1"))
        client = TestClient(TestServer(drip_server.create_app()))
        await client.start_server()
        try:
            resp = await client.get("/ready")

            assert resp.status == 503
            assert await resp.json() == {
                "status": "not_ready",
                "checks": {
                    "configuration": "ok",
                    "faucet": "balance 0 below drip amount 1",
                },
            }
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_metrics_include_drip_counter(self, app_client):
        """GET /metrics exposes the drip request counter."""
        await app_client.post("/api/drip", json={"recipient": "bad"})

        resp = await app_client.get("/metrics")

        assert resp.status == 200
        assert "text/plain" in resp.content_type
        assert "trickle_drip_requests_total" in await resp.text()


@pytest.mark.asyncio
async def test_server_lifecycle():
    """DripServer start and stop lifecycle."""
    coordinator = DripCoordinator(TrickleConfig(), client_factory=MagicMock())
    server = DripServer(coordinator, host="127.0.0.1", port=18081)

    await server.start()
    assert server._runner is not None
    assert server._site is not None

    await server.stop()

    assert server._runner is None
    assert server._site is None
