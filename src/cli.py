#!/usr/bin/env python3
"""
Command-line interface for swapping through the hook pool and managing
distribution pool membership.

Usage:
    python -m src.cli swap --token 2.5
    python -m src.cli swap --units 5 --wait
    python -m src.cli membership 0xYourAccount
    python -m src.cli watch 0xYourAccount --interval 5
    python -m src.cli connect
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from src.config import ConfigError, get_config
from src.core.types import TransactionOutcome
from src.pools.membership import PoolMembershipController
from src.swap.orchestrator import SwapOrchestrator
from src.transport.web3_transport import Web3Transport

logger = logging.getLogger(__name__)


def format_outcome(outcome: TransactionOutcome, explorer=None) -> None:
    """Log the progress or result of a call sequence."""
    if outcome.pending:
        logger.info(f"⏳ {outcome.operation} pending ({len(outcome.tx_hashes)} tx accepted)")
        return

    if outcome.succeeded:
        logger.info(f"✅ {outcome.operation} {outcome.status.value}")
        for tx_hash in outcome.tx_hashes:
            logger.info(f"🔗 {explorer(tx_hash) if explorer else tx_hash}")
    elif outcome.failed:
        logger.error(f"❌ {outcome.operation} failed: {outcome.error}")


def log_progress(outcome: TransactionOutcome) -> None:
    """Observer for in-flight updates; the final state is logged once by the caller."""
    if outcome.pending:
        format_outcome(outcome)


def _resolve_account(args, transport: Web3Transport) -> Optional[str]:
    return getattr(args, "account", None) or transport.from_address


async def run_swap(args, config, transport: Web3Transport) -> bool:
    orchestrator = SwapOrchestrator(transport, config.get_deployment())
    outcome = await orchestrator.swap(
        args.token,
        args.units,
        observer=log_progress,
        wait_for_confirmations=args.wait,
    )
    format_outcome(outcome, explorer=config.chain.get_tx_url)
    return outcome.succeeded


async def run_membership(args, config, transport: Web3Transport) -> bool:
    account = _resolve_account(args, transport)
    if not account:
        logger.error("No account given and no signer configured")
        return False

    controller = PoolMembershipController(transport, config.get_deployment())
    state = await controller.read_membership(account, args.pool)
    logger.info(f"📡 {account}: {'connected' if state.connected else 'not connected'}")
    return True


async def run_watch(args, config, transport: Web3Transport) -> bool:
    account = _resolve_account(args, transport)
    if not account:
        logger.error("No account given and no signer configured")
        return False

    controller = PoolMembershipController(transport, config.get_deployment())
    async for state in controller.poll_membership(account, args.pool, args.interval):
        logger.info(f"📡 {account}: {'connected' if state.connected else 'not connected'}")
    return True


async def run_connect(args, config, transport: Web3Transport) -> bool:
    account = _resolve_account(args, transport)
    if not account:
        logger.error("No account given and no signer configured")
        return False

    controller = PoolMembershipController(transport, config.get_deployment())
    outcome = await controller.connect(account, args.pool, observer=log_progress)
    format_outcome(outcome, explorer=config.chain.get_tx_url)
    return outcome.succeeded


COMMANDS = {
    "swap": run_swap,
    "membership": run_membership,
    "watch": run_watch,
    "connect": run_connect,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Swap through the v4 hook pool and manage GDA pool membership",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Swap with the amount entered on the token side
  python -m src.cli swap --token 2.5

  # Swap with the amount entered on the unit side, wait for 5 confirmations
  python -m src.cli swap --units 5 --wait

  # Check or watch whether an account is connected to the distribution pool
  python -m src.cli membership 0xYourAccount
  python -m src.cli watch 0xYourAccount

  # Connect the signer account to the distribution pool
  python -m src.cli connect
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    swap = subparsers.add_parser("swap", help="Approve both assets and swap")
    side = swap.add_mutually_exclusive_group(required=True)
    side.add_argument("--token", help="Amount entered on the token side")
    side.add_argument("--units", help="Amount entered on the unit side")
    swap.add_argument(
        "--wait", action="store_true", help="Wait for the swap to reach the confirmation threshold"
    )

    for name, help_text in (
        ("membership", "Read pool membership once"),
        ("watch", "Poll pool membership until interrupted"),
        ("connect", "Connect an account to the distribution pool"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("account", nargs="?", help="Account address (defaults to the signer)")
        sub.add_argument("--pool", help="Distribution pool address override")
        if name == "watch":
            sub.add_argument("--interval", type=float, help="Seconds between reads")

    return parser


async def main(argv=None) -> int:
    """Main CLI function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = get_config()
        logger.info(f"🔌 {config.chain.CHAIN_NAME} (chain {config.chain.CHAIN_ID})")
        transport = Web3Transport.from_config(config)
        success = await COMMANDS[args.command](args, config, transport)
        return 0 if success else 1

    except ConfigError as e:
        logger.error(f"⚙️  Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("⏹️  Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"💥 Unexpected error: {e}")
        return 1


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()
