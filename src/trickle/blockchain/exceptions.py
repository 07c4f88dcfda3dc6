"""Errors raised by the faucet contract client."""


class FaucetClientError(Exception):
    """Base class for faucet contract client failures."""


class ContractRevertError(FaucetClientError):
    """A contract call or transaction was reverted with a reason string."""

    def __init__(self, method: str, reason: str) -> None:
        self.method = method
        self.reason = reason
        super().__init__(reason)

    def __str__(self) -> str:
        return f"{self.method} reverted: {self.reason}"

    def __repr__(self) -> str:
        return f"ContractRevertError(method={self.method!r}, reason={self.reason!r})"


class TransactionFailedError(FaucetClientError):
    """A submitted transaction was mined with a failure status."""

    def __init__(self, tx_hash: str, block_number: int | None = None) -> None:
        self.tx_hash = tx_hash
        self.block_number = block_number
        super().__init__(tx_hash)

    def __str__(self) -> str:
        return f"Transaction {self.tx_hash} failed in block {self.block_number}"
