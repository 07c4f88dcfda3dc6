"""Core Trickle components."""

from .wallet import EnvironmentWallet, WalletProvider

__all__ = [
    "EnvironmentWallet",
    "WalletProvider",
]
