"""Drip outcomes and the mapping from failures to user-facing categories."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

SUCCESS_MESSAGE = "Tokens sent successfully!"
RECIPIENT_REQUIRED_MESSAGE = "Recipient address is required"
INVALID_ADDRESS_MESSAGE = "Invalid Ethereum address format"
CONFIGURATION_ERROR_MESSAGE = "Server configuration error. Please contact administrator."
INSUFFICIENT_BALANCE_MESSAGE = "Faucet has insufficient balance. Please contact administrator."
NONCE_CONFLICT_MESSAGE = "Transaction pending. Please wait a moment and try again."
DEFAULT_FAILURE_MESSAGE = "Failed to send tokens. Please try again."


class DripErrorCategory(str, Enum):
    """Why a drip request did not succeed."""

    INVALID_INPUT = "invalid_input"
    CONFIGURATION_ERROR = "configuration_error"
    COOLDOWN_ACTIVE = "cooldown_active"
    CONTRACT_REVERT = "contract_revert"
    INSUFFICIENT_FAUCET_BALANCE = "insufficient_faucet_balance"
    TRANSIENT_NONCE_CONFLICT = "transient_nonce_conflict"
    UNKNOWN = "unknown"

    @property
    def http_status(self) -> int:
        """HTTP status reported to the caller for this category."""
        if self is DripErrorCategory.INVALID_INPUT:
            return 400
        if self is DripErrorCategory.COOLDOWN_ACTIVE:
            return 429
        return 500


@dataclass(frozen=True)
class DripSuccess:
    """A drip transaction was mined."""

    tx_hash: str
    block_number: int
    message: str = SUCCESS_MESSAGE

    success = True
    http_status = 200
    label = "success"

    def to_response(self) -> tuple[int, dict[str, Any]]:
        """HTTP status and JSON body for this outcome."""
        return self.http_status, {
            "success": True,
            "txHash": self.tx_hash,
            "blockNumber": self.block_number,
            "message": self.message,
        }


@dataclass(frozen=True)
class DripFailure:
    """A drip request that ended without a mined transaction."""

    category: DripErrorCategory
    message: str

    success = False

    @property
    def http_status(self) -> int:
        return self.category.http_status

    @property
    def label(self) -> str:
        return self.category.value

    def to_response(self) -> tuple[int, dict[str, Any]]:
        """HTTP status and JSON body for this outcome."""
        return self.http_status, {"error": self.message}


DripOutcome = DripSuccess | DripFailure


def _revert_reason(error: BaseException) -> str | None:
    reason = getattr(error, "reason", None)
    if isinstance(reason, str) and reason:
        return reason
    return None


def _error_text(error: BaseException) -> str:
    # web3 errors keep their text in ``message``; their str() is the args tuple.
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error)


@dataclass(frozen=True)
class ErrorRule:
    """Maps failures matching ``predicate`` to ``category``."""

    category: DripErrorCategory
    predicate: Callable[[BaseException], bool]
    message: Callable[[BaseException], str]


# Order matters: the first matching rule wins.
ERROR_RULES: tuple[ErrorRule, ...] = (
    ErrorRule(
        category=DripErrorCategory.CONTRACT_REVERT,
        predicate=lambda e: _revert_reason(e) is not None,
        message=lambda e: _revert_reason(e) or DEFAULT_FAILURE_MESSAGE,
    ),
    ErrorRule(
        category=DripErrorCategory.INSUFFICIENT_FAUCET_BALANCE,
        predicate=lambda e: "insufficient funds" in _error_text(e),
        message=lambda e: INSUFFICIENT_BALANCE_MESSAGE,
    ),
    ErrorRule(
        category=DripErrorCategory.TRANSIENT_NONCE_CONFLICT,
        predicate=lambda e: "nonce" in _error_text(e),
        message=lambda e: NONCE_CONFLICT_MESSAGE,
    ),
)


def classify_error(error: BaseException) -> DripFailure:
    """Turn a contract interaction failure into a drip failure.

    Parameters
    ----------
    error : BaseException
        The exception raised while querying or dispatching.

    Returns
    -------
    DripFailure
        The first matching rule's category and message, or ``UNKNOWN``
        carrying the raw error text.
    """
    for rule in ERROR_RULES:
        if rule.predicate(error):
            return DripFailure(category=rule.category, message=rule.message(error))
    return DripFailure(
        category=DripErrorCategory.UNKNOWN,
        message=_error_text(error) or DEFAULT_FAILURE_MESSAGE,
    )


def invalid_input(message: str) -> DripFailure:
    """Failure for a malformed drip request."""
    return DripFailure(category=DripErrorCategory.INVALID_INPUT, message=message)
