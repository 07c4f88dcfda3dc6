"""Faucet components for Trickle."""

from .coordinator import (
    DripCoordinator,
    DripRequest,
    InvalidDripRequest,
    build_faucet_client,
    format_cooldown,
    validate_recipient,
)
from .outcome import DripErrorCategory, DripFailure, DripOutcome, DripSuccess, classify_error

__all__ = [
    "DripCoordinator",
    "DripErrorCategory",
    "DripFailure",
    "DripOutcome",
    "DripRequest",
    "DripSuccess",
    "InvalidDripRequest",
    "build_faucet_client",
    "classify_error",
    "format_cooldown",
    "validate_recipient",
]
