#!/usr/bin/env python3
"""
Command-line interface for the contract risk scanner.

Usage:
    riskscan 0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48
    riskscan 0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48 base
    riskscan 0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48 --chain eth --json
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Callable, List, Optional

from pydantic import TypeAdapter

from ..config import ConfigError, Endpoint
from .orchestrator import AbortReason, RiskScanner, ScanResult
from .report import render_report

logger = logging.getLogger(__name__)

FAILED_ABORTS = (AbortReason.CODE_UNAVAILABLE, AbortReason.ERROR, AbortReason.TIMEOUT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="riskscan",
        description="Evidence-based risk scan of an EVM token contract",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan on the default chain
  riskscan 0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48

  # Scan on a chain given by name, alias or chain id
  riskscan 0x4200000000000000000000000000000000000006 base
  riskscan 0x4200000000000000000000000000000000000006 --chain 8453

  # Machine-readable output
  riskscan 0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48 --json
        """,
    )
    parser.add_argument("address", nargs="?", help="Contract address to scan")
    parser.add_argument("chain_arg", nargs="?", metavar="chain", help="Chain name, alias or chain id")
    parser.add_argument("--chain", dest="chain_opt", help="Chain name, alias or chain id")
    parser.add_argument("--json", action="store_true", help="Print the scan result as JSON")
    return parser


def format_json(scan: ScanResult) -> str:
    return TypeAdapter(ScanResult).dump_json(scan, indent=2).decode()


async def main(
    argv: Optional[List[str]] = None,
    client_factory: Optional[Callable[[Endpoint], Any]] = None,
) -> int:
    """
    Parse arguments, run one scan and print the result.

    Args:
        argv: Arguments without the program name (sys.argv when omitted)
        client_factory: Builds a web3-like client per endpoint

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.address:
        parser.print_usage(sys.stderr)
        print("error: a contract address is required", file=sys.stderr)
        return 1

    try:
        scanner = RiskScanner(args.chain_opt or args.chain_arg, client_factory=client_factory)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        scan = await scanner.scan(args.address)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(format_json(scan))
    else:
        print("\n".join(render_report(scan)))

    if scan.aborted and scan.aborted.reason in FAILED_ABORTS:
        logger.error(f"❌ Scan failed: {scan.aborted.message}")
        return 1
    return 0


def run():
    """Console-script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("⏹️  Scan interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"💥 Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
