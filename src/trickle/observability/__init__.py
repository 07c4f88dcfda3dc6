"""Observability module for Trickle."""

from .health import (
    CheckResult,
    ConfigurationCheck,
    FaucetBalanceCheck,
    HealthCheck,
    HealthResult,
    HealthStatus,
    run_checks,
)
from .logging import clear_request_id, configure_logging, set_request_id
from .metrics import DRIP_DURATION, DRIP_REQUESTS, FAUCET_BALANCE, TRANSACTION_DURATION

__all__ = [
    # Health
    "CheckResult",
    "ConfigurationCheck",
    "FaucetBalanceCheck",
    "HealthCheck",
    "HealthResult",
    "HealthStatus",
    "run_checks",
    # Logging
    "clear_request_id",
    "configure_logging",
    "set_request_id",
    # Metrics
    "DRIP_DURATION",
    "DRIP_REQUESTS",
    "FAUCET_BALANCE",
    "TRANSACTION_DURATION",
]
