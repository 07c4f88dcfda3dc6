"""Blockchain integration for Trickle."""

from .client import DripReceipt, FaucetContract, PendingDrip, Web3FaucetClient
from .exceptions import ContractRevertError, FaucetClientError, TransactionFailedError
from .networks import NetworkInfo

__all__ = [
    "ContractRevertError",
    "DripReceipt",
    "FaucetClientError",
    "FaucetContract",
    "NetworkInfo",
    "PendingDrip",
    "TransactionFailedError",
    "Web3FaucetClient",
]
