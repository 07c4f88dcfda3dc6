"""Network details used to link drips to a block explorer."""

from dataclasses import dataclass


@dataclass
class NetworkInfo:
    """Network information discovered at runtime.

    Attributes
    ----------
    rpc_endpoint : str
        The RPC endpoint URL.
    chain_id : int
        The chain ID reported by the endpoint.
    block_explorer_url : str | None
        Optional explorer base URL.
    """

    rpc_endpoint: str
    chain_id: int
    block_explorer_url: str | None = None

    def get_tx_url(self, tx_hash: str) -> str | None:
        """Explorer link for a transaction, or None without an explorer."""
        if self.block_explorer_url:
            return f"{self.block_explorer_url.rstrip('/')}/tx/{tx_hash}"
        return None
