"""Prometheus metrics for Trickle.

Metrics:
- trickle_drip_requests_total: Counter of drip requests by outcome category
- trickle_faucet_balance_wei: Gauge of the faucet balance last read by the CLI or readiness probe
- trickle_drip_duration_seconds: Histogram of end-to-end drip handling time
- trickle_transaction_duration_seconds: Histogram of submit-to-confirmation time
"""

from prometheus_client import Counter, Gauge, Histogram

DRIP_REQUESTS = Counter(
    "trickle_drip_requests_total",
    "Total number of drip requests",
    ["category"],
)

FAUCET_BALANCE = Gauge(
    "trickle_faucet_balance_wei",
    "Faucet contract balance in wei",
)

DRIP_DURATION = Histogram(
    "trickle_drip_duration_seconds",
    "Drip request handling duration",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

TRANSACTION_DURATION = Histogram(
    "trickle_transaction_duration_seconds",
    "Drip transaction submit-to-confirmation duration",
    buckets=(1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)
