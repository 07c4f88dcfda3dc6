#!/usr/bin/env python3
"""Trickle - on-chain faucet drip service.

Entry point for the Trickle service.
"""

import asyncio
import logging
import os
import signal
import sys
import tempfile
from pathlib import Path

from eth_account import Account

from trickle.api.server import DripServer
from trickle.cli import create_parser, run_cli
from trickle.config import TrickleConfig
from trickle.faucet.coordinator import DripCoordinator
from trickle.observability.health import ConfigurationCheck, FaucetBalanceCheck
from trickle.observability.logging import configure_logging


def generate_wallet(output_path: str) -> None:
    """Generate a new wallet and save the private key to a file.

    Parameters
    ----------
    output_path : str
        Path to save the private key file.
    """
    account = Account.create()

    key_path = Path(output_path)
    key_path.parent.mkdir(parents=True, exist_ok=True)

    # Write to a 0600 temp file in the same directory, then rename into place.
    fd, temp_path = tempfile.mkstemp(dir=key_path.parent, prefix=".trickle-key-")
    fd_closed = False
    try:
        os.fchmod(fd, 0o600)
        os.write(fd, account.key.hex().encode())
        os.close(fd)
        fd_closed = True
        os.rename(temp_path, key_path)
    except Exception:
        if not fd_closed:
            os.close(fd)
        Path(temp_path).unlink(missing_ok=True)
        raise

    print(f"""
Wallet generated successfully!

  Address:     {account.address}
  Private Key: {key_path.absolute()}

Next steps:

  1. Make this address the owner (or an authorized dripper) of your faucet
     contract and fund it with enough native coin to pay for gas

  2. Launch Trickle with this wallet:

     export TRICKLE_WALLET_PRIVATE_KEY_FILE={key_path.absolute()}
     export TRICKLE_RPC_ENDPOINT=<rpc url>
     export TRICKLE_FAUCET_CONTRACT_ADDRESS=<faucet contract>
     trickle run

IMPORTANT: Keep this private key secure. Anyone with access can control the wallet.
""")


def parse_args():
    """Parse command line arguments."""
    return create_parser().parse_args()


async def run_service(config: TrickleConfig) -> None:
    """Run the Trickle HTTP service until SIGTERM or SIGINT.

    Parameters
    ----------
    config : TrickleConfig
        Loaded service configuration.
    """
    configure_logging(level=config.log_level, log_format=config.log_format.value)

    logger = logging.getLogger(__name__)
    logger.info("Trickle starting")
    logger.info("RPC endpoint: %s", config.rpc_endpoint)
    logger.info("Faucet contract: %s", config.faucet_contract_address)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def on_shutdown_signal(sig_name: str) -> None:
        logger.info("Received signal %s, initiating shutdown", sig_name)
        shutdown_event.set()

    loop.add_signal_handler(signal.SIGTERM, lambda: on_shutdown_signal("SIGTERM"))
    loop.add_signal_handler(signal.SIGINT, lambda: on_shutdown_signal("SIGINT"))

    coordinator = DripCoordinator(config)

    server = DripServer(coordinator, host=config.host, port=config.port)
    server.add_check(ConfigurationCheck(coordinator))
    server.add_check(FaucetBalanceCheck(coordinator))
    await server.start()
    logger.info("Trickle ready on %s:%d", config.host, config.port)

    await shutdown_event.wait()

    logger.info("Trickle shutting down...")
    await server.stop()
    logger.info("Trickle shutdown complete")


def main() -> None:
    """Main entry point for Trickle."""
    args = parse_args()

    if args.generate_wallet:
        generate_wallet(args.generate_wallet)
        return

    if args.command and args.command != "run":
        exit_code = run_cli(args)
        if exit_code >= 0:
            sys.exit(exit_code)
        create_parser().print_help()
        sys.exit(0)

    try:
        config = TrickleConfig()
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    asyncio.run(run_service(config))


if __name__ == "__main__":
    main()
