"""Trickle - on-chain faucet drip service."""

__version__ = "0.1.0"
