"""Readiness checks for Trickle.

The HTTP server exposes:
- /health: Liveness probe (200 if process is alive)
- /ready: Readiness probe (200 if every check below passes)
- /metrics: Prometheus metrics endpoint
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .metrics import FAUCET_BALANCE

if TYPE_CHECKING:
    from trickle.faucet.coordinator import DripCoordinator

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health check status values."""

    OK = "ok"
    ERROR = "error"
    NOT_READY = "not_ready"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str | None = None


@dataclass
class HealthResult:
    """Combined health check result."""

    status: HealthStatus
    checks: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {"status": self.status.value}
        if self.checks:
            result["checks"] = self.checks
        return result


class HealthCheck(ABC):
    """Abstract base class for health checks."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the health check."""
        ...

    @abstractmethod
    async def check(self) -> CheckResult:
        """Perform the health check."""
        ...


class ConfigurationCheck(HealthCheck):
    """Ready only when every drip setting is present."""

    def __init__(self, coordinator: "DripCoordinator"):
        self._coordinator = coordinator

    @property
    def name(self) -> str:
        return "configuration"

    async def check(self) -> CheckResult:
        if self._coordinator.configured:
            return CheckResult(name=self.name, status=HealthStatus.OK)
        return CheckResult(
            name=self.name,
            status=HealthStatus.ERROR,
            message=f"missing: {', '.join(self._coordinator.missing_settings)}",
        )


class FaucetBalanceCheck(HealthCheck):
    """Ready only when the faucet holds at least one drip's worth of tokens.

    Reading the contract doubles as an RPC reachability probe, so a failed
    read also marks the service not ready.
    """

    def __init__(self, coordinator: "DripCoordinator"):
        self._coordinator = coordinator

    @property
    def name(self) -> str:
        return "faucet"

    async def check(self) -> CheckResult:
        if not self._coordinator.configured:
            return CheckResult(name=self.name, status=HealthStatus.ERROR, message="not configured")

        client = self._coordinator.get_client()
        balance = await asyncio.to_thread(client.get_faucet_balance)
        amount = await asyncio.to_thread(client.drip_amount)
        FAUCET_BALANCE.set(balance)

        if balance < amount:
            return CheckResult(
                name=self.name,
                status=HealthStatus.ERROR,
                message=f"balance {balance} below drip amount {amount}",
            )
        return CheckResult(name=self.name, status=HealthStatus.OK)


async def run_checks(checks: list[HealthCheck]) -> HealthResult:
    """Run readiness checks and combine their results.

    Parameters
    ----------
    checks : list[HealthCheck]
        Checks to run, in order.

    Returns
    -------
    HealthResult
        OK only if every check passed. A check that raises counts as failed.
    """
    if not checks:
        return HealthResult(status=HealthStatus.OK)

    results: dict[str, str] = {}
    all_ok = True

    for check in checks:
        try:
            result = await check.check()
            if result.status == HealthStatus.OK:
                results[result.name] = "ok"
            else:
                results[result.name] = result.message or "error"
                all_ok = False
        except Exception as e:
            logger.exception("Health check failed", extra={"check": check.name})
            results[check.name] = f"error: {type(e).__name__}: {e}"
            all_ok = False

    return HealthResult(
        status=HealthStatus.OK if all_ok else HealthStatus.NOT_READY,
        checks=results,
    )
