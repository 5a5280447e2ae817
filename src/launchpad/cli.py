"""
Command-line interface for the token launchpad.
"""

import argparse
import sys

import uvloop

from launchpad.config_loader import load_config, print_config_summary
from launchpad.core.client import SolanaClient
from launchpad.core.errors import LaunchpadError
from launchpad.core.wallet import KeypairSigner, PromptingSigner, Wallet
from launchpad.launchpad import TokenLaunchpad
from launchpad.tokens.addresses import parse_address
from launchpad.tokens.amounts import from_base_units
from launchpad.tokens.coordinator import SubmissionCoordinator
from launchpad.tokens.models import (
    CreateTokenResult,
    SubmissionOutcome,
    TokenMintSpec,
    TransferRequest,
)
from launchpad.utils.logger import get_logger, set_level, setup_file_logging

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Create and transfer SPL tokens.")
    parser.add_argument(
        "--config", default="config/devnet.yaml", help="Path to the YAML configuration"
    )
    parser.add_argument(
        "--yes", action="store_true", help="Approve transactions without prompting"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Launch a new token")
    create.add_argument("--name", required=True, help="Token name, e.g. MyToken")
    create.add_argument("--symbol", required=True, help="Token symbol, e.g. MTK")
    create.add_argument("--supply", required=True, help="Initial supply in whole tokens")
    create.add_argument("--decimals", type=int, default=9, help="Decimals, 0-9 (default: 9)")
    create.add_argument(
        "--freeze-authority", action="store_true", help="Keep a freeze authority on the mint"
    )

    transfer = subparsers.add_parser("transfer", help="Send tokens to another wallet")
    transfer.add_argument("--mint", required=True, help="Token mint address")
    transfer.add_argument("--to", required=True, help="Recipient wallet address")
    transfer.add_argument("--amount", required=True, help="Amount in whole tokens")

    holdings = subparsers.add_parser("holdings", help="List token balances")
    holdings.add_argument("--owner", help="Wallet to inspect (default: configured wallet)")

    subparsers.add_parser("health", help="Check the RPC node health")

    return parser.parse_args(argv)


def print_outcome(outcome: SubmissionOutcome) -> None:
    if outcome.success:
        print(f"Transaction Signature: {outcome.signature}")
        print(f"Explorer: {outcome.explorer_url}")
    else:
        print(f"Error ({outcome.kind.value}): {outcome.reason}")


def print_created_token(result: CreateTokenResult) -> None:
    if result.outcome.success:
        print("Token Created Successfully!")
    print(f"Name: {result.spec.name}")
    print(f"Symbol: {result.spec.symbol}")
    print(f"Supply: {result.spec.initial_supply_whole}")
    print(f"Decimals: {result.spec.decimals}")
    if result.mint:
        print(f"Token Address: {result.mint}")
    print(
        "Features: "
        + ("Freeze Authority Enabled" if result.spec.freeze_authority_enabled else "No Freeze Authority")
    )
    print_outcome(result.outcome)
    if result.mint_explorer_url:
        print(f"View on Solana Explorer: {result.mint_explorer_url}")


async def run(args: argparse.Namespace, config: dict) -> int:
    client = SolanaClient(config["rpc_endpoint"], commitment=config["commitment"])
    try:
        if args.command == "health":
            health = await client.get_health()
            print(f"Node health: {health or 'unreachable'}")
            return 0 if health == "ok" else 1

        signer = KeypairSigner(
            Wallet(config["private_key"]),
            client,
            skip_preflight=config["send"]["skip_preflight"],
            max_retries=config["send"]["max_retries"],
        )
        if not args.yes:
            signer = PromptingSigner(signer)

        coordinator = SubmissionCoordinator(
            client,
            signer,
            max_attempts=config["confirmation"]["max_attempts"],
            poll_interval=config["confirmation"]["poll_interval"],
            cluster=config["cluster"],
        )
        launchpad = TokenLaunchpad(client, signer, coordinator, cluster=config["cluster"])

        if args.command == "create":
            result = await launchpad.create_token(
                TokenMintSpec(
                    name=args.name,
                    symbol=args.symbol,
                    decimals=args.decimals,
                    initial_supply_whole=args.supply,
                    freeze_authority_enabled=args.freeze_authority,
                )
            )
            print_created_token(result)
            return 0 if result.outcome.success else 1

        if args.command == "transfer":
            outcome = await launchpad.transfer_token(
                TransferRequest(
                    mint=parse_address(args.mint),
                    recipient_address_raw=args.to,
                    amount_whole=args.amount,
                )
            )
            print_outcome(outcome)
            return 0 if outcome.success else 1

        owner = parse_address(args.owner) if args.owner else None
        records = await launchpad.refresh_holdings(owner)
        if not records:
            print("No token accounts found")
        for record in sorted(records, key=lambda r: str(r.mint)):
            decimals = await launchpad.get_mint_decimals(record.mint)
            amount = from_base_units(record.balance_base_units, decimals)
            print(f"{record.mint}: {amount} ({record.balance_base_units} base units)")
        return 0
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the CLI."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Configuration error: {e!s}")
        sys.exit(2)

    set_level(config["logging"]["level"])
    log_file = config["logging"].get("file")
    if log_file:
        setup_file_logging(log_file, config["logging"]["level"])
    print_config_summary(config)

    try:
        exit_code = uvloop.run(run(args, config))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        exit_code = 130
    except (LaunchpadError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e!s}")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
