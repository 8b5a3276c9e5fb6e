"""
Command-line runner for the token launchpad.

    token-launchpad --config launchpad.yaml create --name Gold --symbol GLD \\
        --uri https://example.com/gold.json --supply 100
    token-launchpad --config launchpad.yaml mint --mint <MINT> --amount 5
    token-launchpad --config launchpad.yaml inspect --mint <MINT>
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import uvloop

from config_loader import (
    get_standard_from_config,
    load_launchpad_config,
    print_config_summary,
)
from core.client import SolanaClient
from core.errors import LaunchpadError
from core.wallet import Wallet
from flows.base import FlowStatus
from flows.launchpad import TokenLaunchpad
from interfaces.core import TokenSpec, TokenStandard
from utils.amounts import from_raw_amount
from utils.logger import set_log_level, setup_file_logging


def setup_logging(command: str):
    """Set up logging to file for one launchpad run."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = log_dir / f"launchpad_{command}_{timestamp}.log"

    setup_file_logging(str(log_filename))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Create Solana tokens and mint their supply."
    )
    parser.add_argument(
        "--config",
        default="launchpad.yaml",
        help="Path to the launchpad YAML config (default: launchpad.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create a new token")
    create.add_argument("--name", required=True, help="Token name")
    create.add_argument("--symbol", required=True, help="Token symbol")
    create.add_argument("--uri", required=True, help="Metadata JSON uri")
    create.add_argument("--decimals", type=int, help="Token decimals (default from config)")
    create.add_argument("--supply", help="Initial supply minted to the wallet")
    create.add_argument(
        "--standard",
        choices=["classic", "extended"],
        help="Token standard (default from config)",
    )

    mint = subparsers.add_parser("mint", help="Mint more of an existing token")
    mint.add_argument("--mint", required=True, help="Mint address")
    mint.add_argument("--amount", required=True, help="Amount to mint")
    mint.add_argument("--recipient", help="Recipient wallet (default: own wallet)")
    mint.add_argument("--decimals", type=int, help="Token decimals (read from the mint if omitted)")
    mint.add_argument(
        "--standard",
        choices=["classic", "extended"],
        help="Token standard (read from the mint owner if omitted)",
    )

    inspect = subparsers.add_parser("inspect", help="Show the state of a mint")
    inspect.add_argument("--mint", required=True, help="Mint address")

    return parser.parse_args(argv)


def print_status(status: FlowStatus) -> None:
    if status.message:
        print(status.message)


async def resolve_mint_target(
    launchpad: TokenLaunchpad, args: argparse.Namespace
) -> tuple[TokenStandard | str, int]:
    """Fill in the standard and decimals of the mint sub-command from the ledger.

    Returns:
        Standard and decimals, as given on the command line when present
    """
    standard = args.standard
    if standard is None:
        standard = await launchpad.detect_standard(args.mint)
    decimals = args.decimals
    if decimals is None:
        decimals = (await launchpad.describe_mint(args.mint)).decimals
    return standard, decimals


async def run(args: argparse.Namespace) -> int:
    """Run one launchpad command.

    Returns:
        Process exit code
    """
    cfg = load_launchpad_config(args.config)
    setup_logging(args.command)
    set_log_level(cfg["log_level"])
    print_config_summary(cfg)

    client = SolanaClient(
        cfg["rpc_endpoint"],
        commitment=cfg["commitment"],
        skip_preflight=cfg["skip_preflight"],
    )
    launchpad = TokenLaunchpad(
        client,
        Wallet(cfg["private_key"], client),
        priority_fee=cfg["priority_fee"],
        poll_interval=cfg["confirmation"]["poll_interval"],
        on_update=print_status,
    )

    try:
        if args.command == "inspect":
            info = await launchpad.describe_mint(args.mint)
            print(f"Supply: {from_raw_amount(info.supply, info.decimals)}")
            print(f"Decimals: {info.decimals}")
            print(f"Mint authority: {info.mint_authority}")
            print(f"Freeze authority: {info.freeze_authority}")
            return 0

        if args.command == "create":
            spec = TokenSpec(
                name=args.name,
                symbol=args.symbol,
                metadata_uri=args.uri,
                decimals=(
                    args.decimals
                    if args.decimals is not None
                    else cfg["token"]["decimals"]
                ),
                initial_supply=args.supply,
            )
            result = await launchpad.create_token(
                spec, args.standard or get_standard_from_config(cfg)
            )
        else:
            standard, decimals = await resolve_mint_target(launchpad, args)
            result = await launchpad.mint_more(
                args.mint, standard, decimals, args.recipient, args.amount
            )
    except LaunchpadError as e:
        logging.error(f"{args.command} failed: {e}")
        return 1
    finally:
        await launchpad.close()

    print(json.dumps(result.to_dict(), indent=2))
    if result.expired:
        print("The transaction may still land. Check the signature before retrying.")
    return 0 if result.success else 1


def main() -> None:
    """Main entry point for the token-launchpad command."""
    args = parse_args()
    sys.exit(uvloop.run(run(args)))


if __name__ == "__main__":
    main()
