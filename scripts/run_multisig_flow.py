#!/usr/bin/env python3
"""Run the 2-of-2 threshold flow end to end.

Two owners control one account with threshold 2. Owner 1 builds a
batch of two NFT mints, has it sponsored, proposes it and confirms it;
owner 2 finds the pending proposal by its signing hash and confirms;
then the operation is submitted once and its receipt awaited.

Usage:
    # In-memory collaborators (no network)
    python scripts/run_multisig_flow.py

    # Live bundler, paymaster and coordination service (from .env)
    python scripts/run_multisig_flow.py --live --account 0x...

Environment:
    SIGNER_KEY_1, SIGNER_KEY_2: hex Ed25519 seeds (generated when unset)
    CHAIN_ID, BUNDLER_URL, PAYMASTER_URL, SPONSORSHIP_POLICY_ID,
    TX_SERVICE_URL, TX_SERVICE_API_KEY: see CoordinatorConfig
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

import blake3
from structlog import get_logger

from multisig_coordinator.bootstrap.coordinator import (
    create_coordinator,
    use_live_collaborators,
)
from multisig_coordinator.bootstrap.logging import configure_structlog
from multisig_coordinator.config.coordinator_config import CoordinatorConfig
from multisig_coordinator.domain.exceptions import CoordinatorError
from multisig_coordinator.domain.models.account import AccountConfig
from multisig_coordinator.domain.models.operation import Action, normalize_address
from multisig_coordinator.infrastructure.adapters.crypto.ed25519_signer import (
    Ed25519HashSigner,
)
from multisig_coordinator.infrastructure.observability import get_logger_for_signer
from multisig_coordinator.infrastructure.observability.correlation import (
    generate_correlation_id,
    set_correlation_id,
)

logger = get_logger()

DEFAULT_NFT_CONTRACT = "0x9a7af758aE5d7B6aAE84fe4C5Ba67c041dFE5336"
# mint(address)
MINT_SELECTOR = bytes.fromhex("6a627842")


class Colors:
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def print_header(text: str) -> None:
    """Print a section header."""
    print(f"\n{Colors.BOLD}{Colors.CYAN}{'=' * 70}")
    print(f"  {text}")
    print(f"{'=' * 70}{Colors.ENDC}\n")


def load_signer(env_key: str) -> Ed25519HashSigner:
    """Load a signer seed from the environment, or generate one."""
    seed = os.environ.get(env_key)
    if seed:
        return Ed25519HashSigner.from_seed_hex(seed)
    print(f"  {Colors.YELLOW}{env_key} not set, generating a key{Colors.ENDC}")
    return Ed25519HashSigner.generate()


def demo_account_address(identities: list[str]) -> str:
    """Deterministic stand-in address for the in-memory flow."""
    digest = blake3.blake3("".join(identities).encode("ascii")).digest()
    return "0x" + digest[:20].hex()


def mint_actions(nft_contract: str, recipient: str) -> list[Action]:
    """Two mint(recipient) calls on the NFT contract."""
    data = MINT_SELECTOR + bytes(12) + bytes.fromhex(recipient[2:])
    action = Action(to=normalize_address(nft_contract), value=0, data=data)
    return [action, action]


async def main(args: argparse.Namespace) -> int:
    configure_structlog(args.log_env)
    set_correlation_id(generate_correlation_id())

    config = CoordinatorConfig.from_environment()

    print_header("THRESHOLD MULTISIG FLOW (2-of-2)")
    owner1 = load_signer("SIGNER_KEY_1")
    owner2 = load_signer("SIGNER_KEY_2")
    print(f"  Owner 1: {owner1.identity}")
    print(f"  Owner 2: {owner2.identity}")

    if args.live:
        if not args.account:
            print(f"{Colors.RED}--live requires --account{Colors.ENDC}")
            return 1
        try:
            use_live_collaborators(config)
        except ValueError as e:
            print(f"{Colors.RED}{e}{Colors.ENDC}")
            return 1
        address = args.account
    else:
        address = args.account or demo_account_address(
            [owner1.identity, owner2.identity]
        )

    account = AccountConfig.create(
        address, [owner1.identity, owner2.identity], threshold=2
    )
    print(f"  Account: {account.address} (threshold {account.threshold})")
    print(f"  Chain:   {config.chain_id}")

    coordinator = create_coordinator(account, config)
    owner1_log = get_logger_for_signer(owner1.identity, component="multisig_flow")
    owner2_log = get_logger_for_signer(owner2.identity, component="multisig_flow")

    try:
        print(f"\n{Colors.YELLOW}Step 1: Owner 1 proposes the mint batch...{Colors.ENDC}")
        proposal_id = await coordinator.propose(
            mint_actions(args.nft_contract, account.address),
            args.nonce,
            proposer=owner1,
        )
        owner1_log.info("proposal_submitted_by_owner", proposal_id=proposal_id)
        print(f"  Proposal (signing hash): {proposal_id}")

        print(f"\n{Colors.YELLOW}Step 2: Owner 2 confirms by signing hash...{Colors.ENDC}")
        pending = await coordinator.list_pending()
        print(f"  Pending proposals: {len(pending)}")
        if not any(p.proposal_id == proposal_id for p in pending):
            print(f"{Colors.RED}Proposal {proposal_id} is not pending{Colors.ENDC}")
            return 1
        confirmation = await coordinator.confirm(proposal_id, owner2)
        owner2_log.info(
            "confirmation_signed",
            proposal_id=proposal_id,
            confirmation_count=confirmation.confirmation_count,
        )
        print(
            f"  Confirmations: {confirmation.confirmation_count}/"
            f"{confirmation.threshold} ({confirmation.status.value})"
        )

        print(f"\n{Colors.YELLOW}Step 3: Submitting...{Colors.ENDC}")
        result = await coordinator.execute(proposal_id)
    except CoordinatorError as e:
        logger.error("multisig_flow_failed", error_type=type(e).__name__)
        print(f"\n{Colors.RED}Flow failed: {e}{Colors.ENDC}")
        return 1

    print(f"\n{Colors.GREEN}Operation included!{Colors.ENDC}")
    print(f"  Operation id:     {result.operation_id}")
    print(f"  Transaction hash: {result.receipt.transaction_hash}")
    print(f"  Signers:          {len(result.credential.signers)}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Run the 2-of-2 threshold multisig flow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--live",
        action="store_true",
        help="Use the HTTP bundler, paymaster and coordination service",
    )
    parser.add_argument(
        "--account",
        type=str,
        help="Account address (required with --live)",
    )
    parser.add_argument(
        "--nonce",
        type=int,
        default=0,
        help="Account nonce to consume (default: 0)",
    )
    parser.add_argument(
        "--nft-contract",
        type=str,
        default=DEFAULT_NFT_CONTRACT,
        help="NFT contract to mint from",
    )
    parser.add_argument(
        "--log-env",
        type=str,
        default="development",
        help="'production' for JSON logs (default: development)",
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(main(args)))
