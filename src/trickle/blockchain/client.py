"""Faucet contract client for Trickle.

``FaucetContract`` is the capability interface the drip coordinator depends
on. ``Web3FaucetClient`` binds it to a deployed faucet contract over JSON-RPC.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from web3 import Web3
from web3.exceptions import ContractLogicError

from trickle.core.wallet import WalletProvider

from .exceptions import ContractRevertError, FaucetClientError, TransactionFailedError

logger = logging.getLogger(__name__)

REVERT_PREFIX = "execution reverted"

FAUCET_ABI = [
    {
        "type": "function",
        "name": "drip",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "recipient", "type": "address"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "canDrip",
        "stateMutability": "view",
        "inputs": [{"name": "recipient", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "getRemainingCooldown",
        "stateMutability": "view",
        "inputs": [{"name": "recipient", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "dripAmount",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "getFaucetBalance",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


@dataclass(frozen=True)
class DripReceipt:
    """Confirmation of a mined drip transaction."""

    tx_hash: str
    block_number: int


class PendingDrip(ABC):
    """Handle to a submitted drip transaction."""

    @property
    @abstractmethod
    def tx_hash(self) -> str:
        """0x-prefixed transaction hash."""
        ...

    @abstractmethod
    def wait(self) -> DripReceipt:
        """Block until the transaction is mined.

        Raises
        ------
        TransactionFailedError
            If the transaction was mined but failed.
        """
        ...


class FaucetContract(ABC):
    """Operations exposed by the on-chain faucet."""

    @abstractmethod
    def can_drip(self, address: str) -> bool:
        """Whether ``address`` is out of cooldown."""
        ...

    @abstractmethod
    def get_remaining_cooldown(self, address: str) -> int:
        """Seconds until ``address`` may receive another drip."""
        ...

    @abstractmethod
    def drip(self, address: str) -> PendingDrip:
        """Submit a drip transaction to ``address``."""
        ...

    @abstractmethod
    def drip_amount(self) -> int:
        """Amount dispensed per drip, in wei."""
        ...

    @abstractmethod
    def get_faucet_balance(self) -> int:
        """Tokens left in the faucet, in wei."""
        ...


def revert_reason(error: ContractLogicError) -> str:
    """Extract the human readable reason from a contract revert."""
    message = error.message or ""
    if message.startswith(REVERT_PREFIX):
        message = message[len(REVERT_PREFIX) :].lstrip(": ")
    return message


@contextmanager
def catch_contract_revert(method: str) -> Iterator[None]:
    """Re-raise web3 contract reverts as ``ContractRevertError``.

    A bare revert with no reason string becomes a plain ``FaucetClientError``
    so it is not mistaken for a contract-supplied reason.
    """
    try:
        yield
    except ContractLogicError as e:
        reason = revert_reason(e)
        if not reason:
            raise FaucetClientError(e.message or REVERT_PREFIX) from e
        raise ContractRevertError(method=method, reason=reason) from e


class Web3PendingDrip(PendingDrip):
    """Pending drip backed by a web3 connection."""

    def __init__(self, w3: Web3, tx_hash: str):
        self._w3 = w3
        self._tx_hash = tx_hash

    @property
    def tx_hash(self) -> str:
        return self._tx_hash

    def wait(self) -> DripReceipt:
        # No explicit timeout: the web3 default applies.
        receipt = self._w3.eth.wait_for_transaction_receipt(self._tx_hash)
        block_number = receipt["blockNumber"]
        if not receipt["status"]:
            raise TransactionFailedError(self._tx_hash, block_number)
        return DripReceipt(tx_hash=self._tx_hash, block_number=block_number)


class Web3FaucetClient(FaucetContract):
    """Faucet contract bound over JSON-RPC with web3.py.

    Parameters
    ----------
    rpc_endpoint : str
        The JSON-RPC endpoint URL.
    wallet : WalletProvider
        Wallet that signs drip transactions.
    contract_address : str
        Address of the deployed faucet contract.
    """

    def __init__(self, rpc_endpoint: str, wallet: WalletProvider, contract_address: str):
        self._w3 = Web3(Web3.HTTPProvider(rpc_endpoint))
        self._wallet = wallet
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=FAUCET_ABI,
        )

    @property
    def connected(self) -> bool:
        """Whether the RPC endpoint answers."""
        return self._w3.is_connected()

    @property
    def chain_id(self) -> int:
        """Chain ID reported by the RPC endpoint."""
        return self._w3.eth.chain_id

    @property
    def wallet_address(self) -> str:
        """Address of the signing wallet."""
        return self._wallet.address

    def can_drip(self, address: str) -> bool:
        recipient = Web3.to_checksum_address(address)
        with catch_contract_revert("canDrip"):
            return bool(self._contract.functions.canDrip(recipient).call())

    def get_remaining_cooldown(self, address: str) -> int:
        recipient = Web3.to_checksum_address(address)
        with catch_contract_revert("getRemainingCooldown"):
            return int(self._contract.functions.getRemainingCooldown(recipient).call())

    def drip_amount(self) -> int:
        with catch_contract_revert("dripAmount"):
            return int(self._contract.functions.dripAmount().call())

    def get_faucet_balance(self) -> int:
        with catch_contract_revert("getFaucetBalance"):
            return int(self._contract.functions.getFaucetBalance().call())

    def drip(self, address: str) -> PendingDrip:
        """Sign and submit ``drip(address)``.

        Gas is estimated while building the transaction, so a drip the contract
        would reject fails here with ``ContractRevertError`` before anything is
        broadcast.

        Returns
        -------
        PendingDrip
            Handle whose ``wait`` resolves once the transaction is mined.
        """
        recipient = Web3.to_checksum_address(address)
        sender = self._wallet.address

        with catch_contract_revert("drip"):
            tx = self._contract.functions.drip(recipient).build_transaction(
                {
                    "from": sender,
                    "gasPrice": self._w3.eth.gas_price,
                    "nonce": self._w3.eth.get_transaction_count(sender, "pending"),
                    "chainId": self._w3.eth.chain_id,
                }
            )

        signed = self._wallet.get_account().sign_transaction(tx)
        tx_hash = Web3.to_hex(self._w3.eth.send_raw_transaction(signed.raw_transaction))

        logger.info(
            "Drip transaction submitted",
            extra={"tx_hash": tx_hash, "recipient": recipient},
        )

        return Web3PendingDrip(self._w3, tx_hash)
