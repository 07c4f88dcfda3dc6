"""CLI subcommands for Trickle operations.

Provides command-line interface for:
- Wallet operations (address)
- Faucet operations (status, drip)
- Running the HTTP service
"""

import argparse
import asyncio
import json
import sys

from web3 import Web3

from trickle.blockchain.client import Web3FaucetClient
from trickle.blockchain.networks import NetworkInfo
from trickle.config import TrickleConfig
from trickle.core.wallet import EnvironmentWallet
from trickle.faucet.coordinator import DripCoordinator, DripRequest, build_faucet_client
from trickle.faucet.outcome import DripSuccess
from trickle.observability.metrics import FAUCET_BALANCE


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="trickle",
        description="Trickle - on-chain faucet drip service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    parser.add_argument(
        "--generate-wallet",
        metavar="FILE",
        help="Generate a new wallet and save private key to FILE, then exit",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    wallet_parser = subparsers.add_parser("wallet", help="Wallet operations")
    wallet_sub = wallet_parser.add_subparsers(dest="wallet_command")
    wallet_sub.add_parser("address", help="Show the signing wallet address")

    faucet_parser = subparsers.add_parser("faucet", help="Faucet operations")
    faucet_sub = faucet_parser.add_subparsers(dest="faucet_command")
    faucet_sub.add_parser("status", help="Show drip amount and faucet balance")
    drip_parser = faucet_sub.add_parser("drip", help="Drip tokens to an address")
    drip_parser.add_argument("address", type=str, help="Recipient address")

    subparsers.add_parser("run", help="Start the Trickle HTTP service")

    return parser


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(self, config: TrickleConfig, json_output: bool = False):
        self.config = config
        self.json_output = json_output
        self._wallet: EnvironmentWallet | None = None
        self._client: Web3FaucetClient | None = None

    @property
    def wallet(self) -> EnvironmentWallet:
        """Get wallet (lazy loaded)."""
        if self._wallet is None:
            if not self.config.has_signing_credential:
                raise ValueError(
                    "No wallet configured. "
                    "Set TRICKLE_WALLET_PRIVATE_KEY or TRICKLE_WALLET_PRIVATE_KEY_FILE"
                )
            self._wallet = EnvironmentWallet.from_config(self.config)
        return self._wallet

    @property
    def client(self) -> Web3FaucetClient:
        """Get faucet client (lazy loaded)."""
        if self._client is None:
            missing = self.config.missing_drip_settings()
            if missing:
                raise ValueError(f"Missing configuration: {', '.join(missing)}")
            self._client = build_faucet_client(self.config)
        return self._client

    def output(self, data: dict) -> None:
        """Output data in the appropriate format."""
        if self.json_output:
            print(json.dumps(data, indent=2))
        else:
            for key, value in data.items():
                print(f"{key}: {value}")


def cmd_wallet_address(ctx: CLIContext) -> int:
    """Show wallet address."""
    try:
        ctx.output({"address": ctx.wallet.address})
        return 0
    except Exception as e:
        ctx.output({"error": str(e)})
        return 1


def cmd_faucet_status(ctx: CLIContext) -> int:
    """Show drip amount and remaining faucet balance."""
    try:
        if not ctx.client.connected:
            ctx.output({"error": "Not connected to RPC endpoint"})
            return 1

        amount = ctx.client.drip_amount()
        balance = ctx.client.get_faucet_balance()
        FAUCET_BALANCE.set(balance)
        ctx.output(
            {
                "wallet": ctx.client.wallet_address,
                "contract": ctx.config.faucet_contract_address,
                "chain_id": ctx.client.chain_id,
                "drip_amount": str(Web3.from_wei(amount, "ether")),
                "faucet_balance": str(Web3.from_wei(balance, "ether")),
                "drips_remaining": balance // amount if amount else 0,
            }
        )
        return 0
    except Exception as e:
        ctx.output({"error": str(e)})
        return 1


def cmd_faucet_drip(ctx: CLIContext, address: str) -> int:
    """Run a single drip through the coordinator."""
    coordinator = DripCoordinator(ctx.config, client_factory=lambda _config: ctx.client)
    outcome = asyncio.run(coordinator.handle_drip(DripRequest(recipient=address)))

    _, body = outcome.to_response()
    if isinstance(outcome, DripSuccess):
        if ctx.config.block_explorer_url:
            network = NetworkInfo(
                rpc_endpoint=ctx.config.rpc_endpoint or "",
                chain_id=ctx.client.chain_id,
                block_explorer_url=ctx.config.block_explorer_url,
            )
            body["txUrl"] = network.get_tx_url(outcome.tx_hash)
        ctx.output(body)
        return 0

    body["category"] = outcome.category.value
    ctx.output(body)
    return 1


def run_cli(args: argparse.Namespace) -> int:
    """Run a CLI subcommand.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code: 0 for success, positive for error, -1 signals caller
        to show help (no CLI command specified).
    """
    try:
        config = TrickleConfig()
    except Exception as e:
        if args.json:
            print(json.dumps({"error": f"Configuration error: {e}"}))
        else:
            print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    ctx = CLIContext(config, json_output=args.json)

    if args.command == "wallet":
        if args.wallet_command == "address":
            return cmd_wallet_address(ctx)
        print("Usage: trickle wallet address", file=sys.stderr)
        return 1

    elif args.command == "faucet":
        if args.faucet_command == "status":
            return cmd_faucet_status(ctx)
        elif args.faucet_command == "drip":
            return cmd_faucet_drip(ctx, args.address)
        print("Usage: trickle faucet [status|drip ADDRESS]", file=sys.stderr)
        return 1

    return -1
