"""HTTP API for Trickle."""

from .server import DripServer

__all__ = ["DripServer"]
