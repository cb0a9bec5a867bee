"""
Command-line interface for transaction preparation.

Provides commands for inspecting the ledger and preparing unsigned transfers.
"""

import argparse
import asyncio
import logging
import sys

import structlog

from solprep import __version__
from solprep.config import NetworkType, PrepConfig, RpcProvider, set_config
from solprep.errors import TransactionBuildError
from solprep.ledger import create_ledger
from solprep.tx.builder import TransactionBuilder


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--network",
        choices=[n.value for n in NetworkType],
        default=NetworkType.DEVNET.value,
        help="Solana cluster (default: devnet)",
    )
    parser.add_argument(
        "--rpc-url",
        help="Custom RPC endpoint",
    )
    parser.add_argument(
        "--provider",
        choices=[p.value for p in RpcProvider],
        default=RpcProvider.HTTP.value,
        help="Ledger backend (default: http)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="solprep",
        description="Prepare Solana transactions for sending or simulation",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    blockhash_parser = subparsers.add_parser("blockhash", help="Print the latest blockhash")
    _add_connection_args(blockhash_parser)

    sol_parser = subparsers.add_parser(
        "prepare-sol",
        help="Prepare an unsigned SOL transfer",
    )
    sol_parser.add_argument("--from", dest="from_wallet", required=True, help="Source wallet")
    sol_parser.add_argument("--to", dest="to_wallet", required=True, help="Destination wallet")
    sol_parser.add_argument("--amount", type=int, required=True, help="Amount in lamports")
    sol_parser.add_argument("--fee-payer", help="Fee payer (default: source wallet)")
    _add_connection_args(sol_parser)

    return parser


def config_from_args(args: argparse.Namespace) -> PrepConfig:
    """Build the configuration from parsed arguments."""
    return PrepConfig(
        network=NetworkType(args.network),
        rpc_provider=RpcProvider(args.provider),
        rpc_url=args.rpc_url,
        log_level=args.log_level,
        log_json=args.log_json,
    )


async def show_blockhash(args: argparse.Namespace) -> None:
    """Print the latest blockhash."""
    config = config_from_args(args)

    async with create_ledger(config) as ledger:
        blockhash = await ledger.get_latest_blockhash(config.commitment)

    print(blockhash if blockhash is not None else "No blockhash available")


async def prepare_sol(args: argparse.Namespace) -> None:
    """Prepare and print an unsigned SOL transfer."""
    from solprep.core.address import parse_address

    config = config_from_args(args)
    set_config(config)
    fee_payer = parse_address(args.fee_payer, "fee payer") if args.fee_payer else None

    async with create_ledger(config) as ledger:
        builder = TransactionBuilder(ledger, config)
        prepared = await builder.prepare_sending_native_sol(
            account=None,
            from_wallet=args.from_wallet,
            to_wallet=args.to_wallet,
            amount=args.amount,
            fee_payer=fee_payer,
        )

    fee = prepared.expected_fee
    print(f"Blockhash:    {prepared.recent_blockhash}")
    print(f"Instructions: {len(prepared.message.instructions)}")
    print(f"Expected fee: {fee if fee is not None else 'unknown'} lamports")
    print(f"Signers:      {', '.join(str(p) for p in prepared.required_signers)}")
    print()
    print(prepared.to_base64())


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level, args.log_json)

    try:
        if args.command == "blockhash":
            asyncio.run(show_blockhash(args))
        elif args.command == "prepare-sol":
            asyncio.run(prepare_sol(args))
    except TransactionBuildError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
