"""Command-line interface for the MToken position indexer."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import load_config
from .logging_setup import configure_logging
from .services import Indexer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="mtoken-position-indexer",
        description="Track MToken participants and refresh their positions",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    run_parser = sub.add_parser("run", help="Follow the chain head continuously")
    run_parser.add_argument(
        "interval",
        nargs="?",
        type=float,
        default=None,
        help="Poll interval in seconds (overrides config)",
    )

    sync_parser = sub.add_parser("sync", help="Catch up to the head once and exit")
    sync_parser.add_argument(
        "--to-block",
        type=int,
        default=None,
        help="Stop after this block instead of the safe head",
    )

    sub.add_parser("refresh", help="Refresh every known position now")

    return parser


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    indexer = Indexer(config)

    try:
        if args.command == "run":
            await indexer.run_continuous(args.interval)
        elif args.command == "sync":
            last = await indexer.sync(args.to_block)
            if last is None:
                logger.info("Nothing to sync")
        elif args.command == "refresh":
            await indexer.refresh_now()
        else:
            build_parser().print_help()
            sys.exit(1)
    finally:
        await indexer.close()


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
