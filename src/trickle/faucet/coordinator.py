"""Drip Coordinator for Trickle.

Runs one drip request end to end:
- Validate the recipient address (local, no I/O)
- Fail closed when the faucet is not configured
- Ask the contract whether the recipient is out of cooldown
- Submit the drip transaction and wait for it to be mined
- Map any failure to a user-facing category
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from web3 import Web3

from trickle.blockchain.client import FaucetContract, Web3FaucetClient
from trickle.config import TrickleConfig
from trickle.core.wallet import EnvironmentWallet
from trickle.observability.metrics import DRIP_DURATION, DRIP_REQUESTS, TRANSACTION_DURATION

from .outcome import (
    CONFIGURATION_ERROR_MESSAGE,
    INVALID_ADDRESS_MESSAGE,
    RECIPIENT_REQUIRED_MESSAGE,
    DripErrorCategory,
    DripFailure,
    DripOutcome,
    DripSuccess,
    classify_error,
    invalid_input,
)

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


class InvalidDripRequest(ValueError):
    """The request body does not describe a drip."""


@dataclass(frozen=True)
class DripRequest:
    """A request to drip tokens to ``recipient``.

    ``recipient`` is left untyped here: whatever the caller sent is checked
    by the coordinator so missing and non-string values get the same answer
    as malformed addresses.
    """

    recipient: Any

    @classmethod
    def from_payload(cls, payload: Any) -> "DripRequest":
        """Build a request from a decoded JSON body.

        Raises
        ------
        InvalidDripRequest
            If the body is not an object or carries keys other than ``recipient``.
        """
        if not isinstance(payload, dict):
            raise InvalidDripRequest("Request body must be a JSON object")
        unexpected = sorted(set(payload) - {"recipient"})
        if unexpected:
            raise InvalidDripRequest(f"Unexpected field(s): {', '.join(unexpected)}")
        return cls(recipient=payload.get("recipient"))


def validate_recipient(recipient: Any) -> DripFailure | None:
    """Check the recipient address format.

    Mixed-case addresses must carry a valid EIP-55 checksum; all-lowercase
    and all-uppercase hex are accepted as-is.

    Returns
    -------
    DripFailure | None
        Failure if the recipient is missing or malformed, None if valid.
    """
    if not recipient or not isinstance(recipient, str):
        return invalid_input(RECIPIENT_REQUIRED_MESSAGE)
    if not Web3.is_address(recipient):
        return invalid_input(INVALID_ADDRESS_MESSAGE)
    if _is_mixed_case(recipient) and not Web3.is_checksum_address(_with_prefix(recipient)):
        return invalid_input(INVALID_ADDRESS_MESSAGE)
    return None


def _strip_prefix(address: str) -> str:
    return address[2:] if address[:2] in ("0x", "0X") else address


def _with_prefix(address: str) -> str:
    return "0x" + _strip_prefix(address)


def _is_mixed_case(address: str) -> bool:
    """Whether the hex digits carry an EIP-55 checksum (neither all lower nor all upper)."""
    digits = _strip_prefix(address)
    return digits != digits.lower() and digits != digits.upper()


def _pluralize(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_cooldown(remaining_seconds: int) -> str:
    """Render a remaining cooldown as whole hours or whole minutes.

    At least an hour left rounds the total up to hours. Anything less rounds
    up to minutes. The two are never combined.

    >>> format_cooldown(3600)
    '1 hour'
    >>> format_cooldown(3599)
    '60 minutes'
    """
    remaining = max(0, int(remaining_seconds))
    if remaining >= SECONDS_PER_HOUR:
        return _pluralize(-(-remaining // SECONDS_PER_HOUR), "hour")
    minutes = -(-(remaining % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE)
    return _pluralize(minutes, "minute")


def build_faucet_client(config: TrickleConfig) -> Web3FaucetClient:
    """Connect a web3 faucet client from a complete configuration."""
    return Web3FaucetClient(
        rpc_endpoint=config.rpc_endpoint,
        wallet=EnvironmentWallet.from_config(config),
        contract_address=config.faucet_contract_address,
    )


class DripCoordinator:
    """Authorizes and dispatches drips.

    Parameters
    ----------
    config : TrickleConfig
        Service configuration. Missing drip settings are detected once, here.
    client_factory : Callable[[TrickleConfig], FaucetContract]
        Builds the contract client on first use. Never called while the
        configuration is incomplete.
    """

    def __init__(
        self,
        config: TrickleConfig,
        client_factory: Callable[[TrickleConfig], FaucetContract] = build_faucet_client,
    ):
        self._config = config
        self._client_factory = client_factory
        self._client: FaucetContract | None = None
        self._missing_settings = config.missing_drip_settings()

        if self._missing_settings:
            logger.error(
                "Faucet is not configured, drips will be refused",
                extra={"missing": self._missing_settings},
            )

    @property
    def configured(self) -> bool:
        """Whether all drip settings are present."""
        return not self._missing_settings

    @property
    def missing_settings(self) -> list[str]:
        """Names of drip settings that are absent."""
        return list(self._missing_settings)

    def get_client(self) -> FaucetContract:
        """Return the contract client, creating it on first use.

        Raises
        ------
        RuntimeError
            If the faucet is not configured.
        """
        if self._missing_settings:
            raise RuntimeError(f"Missing configuration: {', '.join(self._missing_settings)}")
        if self._client is None:
            self._client = self._client_factory(self._config)
        return self._client

    async def handle_drip(self, request: DripRequest) -> DripOutcome:
        """Handle one drip request.

        Parameters
        ----------
        request : DripRequest
            The request to serve.

        Returns
        -------
        DripOutcome
            ``DripSuccess`` with the mined transaction, or ``DripFailure``.
            Never raises for contract or network failures.
        """
        started = time.monotonic()
        outcome = await self._run(request)

        DRIP_REQUESTS.labels(category=outcome.label).inc()
        DRIP_DURATION.observe(time.monotonic() - started)
        return outcome

    async def _run(self, request: DripRequest) -> DripOutcome:
        if error := validate_recipient(request.recipient):
            return error
        recipient: str = request.recipient

        if self._missing_settings:
            return DripFailure(
                category=DripErrorCategory.CONFIGURATION_ERROR,
                message=CONFIGURATION_ERROR_MESSAGE,
            )

        try:
            client = self.get_client()
        except (ValueError, OSError):
            logger.exception("Could not build faucet client")
            return DripFailure(
                category=DripErrorCategory.CONFIGURATION_ERROR,
                message=CONFIGURATION_ERROR_MESSAGE,
            )

        try:
            eligible = await asyncio.to_thread(client.can_drip, recipient)
            if not eligible:
                remaining = await asyncio.to_thread(client.get_remaining_cooldown, recipient)
                logger.info(
                    "Drip refused, cooldown active",
                    extra={"recipient": recipient, "remaining_seconds": remaining},
                )
                return DripFailure(
                    category=DripErrorCategory.COOLDOWN_ACTIVE,
                    message=f"Please wait {format_cooldown(remaining)} before requesting again",
                )

            pending = await asyncio.to_thread(client.drip, recipient)
            with TRANSACTION_DURATION.time():
                receipt = await asyncio.to_thread(pending.wait)
        except Exception as e:
            failure = classify_error(e)
            logger.error(
                "Drip failed",
                extra={
                    "recipient": recipient,
                    "category": failure.category.value,
                    "error": str(e),
                },
                exc_info=True,
            )
            return failure

        logger.info(
            "Drip confirmed",
            extra={
                "recipient": recipient,
                "tx_hash": pending.tx_hash,
                "block_number": receipt.block_number,
            },
        )
        return DripSuccess(tx_hash=pending.tx_hash, block_number=receipt.block_number)
