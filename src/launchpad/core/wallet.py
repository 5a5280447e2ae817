"""
Wallet management and signing for Solana transactions.
"""

import asyncio
from collections.abc import Callable

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from launchpad.core.client import SolanaClient
from launchpad.core.errors import SignerRejected
from launchpad.interfaces.core import Signer
from launchpad.tokens.assembler import AssembledUnit
from launchpad.utils.logger import get_logger

logger = get_logger(__name__)


class Wallet:
    """Manages a Solana wallet for signing transactions."""

    def __init__(self, private_key: str):
        """Initialize wallet from private key.

        Args:
            private_key: Base58 encoded private key
        """
        self._keypair = self._load_keypair(private_key)

    @property
    def pubkey(self) -> Pubkey:
        """Get the public key of the wallet."""
        return self._keypair.pubkey()

    @property
    def keypair(self) -> Keypair:
        """Get the keypair for signing transactions."""
        return self._keypair

    def __repr__(self) -> str:
        return f"Wallet({self.pubkey})"

    @staticmethod
    def _load_keypair(private_key: str) -> Keypair:
        """Load keypair from private key.

        Args:
            private_key: Base58 encoded private key

        Returns:
            Solana keypair
        """
        try:
            private_key_bytes = base58.b58decode(private_key)
            return Keypair.from_bytes(private_key_bytes)
        except ValueError:
            raise ValueError("Private key is not a valid base58 encoded keypair") from None


def sign_unit(unit: AssembledUnit, keypairs: list[Keypair]) -> Transaction:
    """Sign an assembled unit with every required key pair.

    Raises:
        SignerRejected: A required signer is missing
    """
    required = unit.message.account_keys[: unit.message.header.num_required_signatures]
    signers = {}
    for keypair in keypairs:
        if keypair.pubkey() in required:
            signers[keypair.pubkey()] = keypair

    missing = [str(key) for key in required if key not in signers]
    if missing:
        raise SignerRejected(f"Missing signature(s) for {', '.join(missing)}")

    return Transaction(list(signers.values()), unit.message, unit.freshness.blockhash)


class KeypairSigner(Signer):
    """Signer backed by a local key pair wallet, broadcasting through RPC."""

    def __init__(
        self,
        wallet: Wallet | None,
        client: SolanaClient,
        skip_preflight: bool = False,
        max_retries: int = 3,
    ):
        """
        Args:
            wallet: Connected wallet, None when no wallet is connected
            client: Solana RPC client used for broadcasting
            skip_preflight: Whether to skip preflight simulation
            max_retries: Send attempts on transport failures
        """
        self.wallet = wallet
        self.client = client
        self.skip_preflight = skip_preflight
        self.max_retries = max_retries

    @property
    def identity(self) -> Pubkey | None:
        return self.wallet.pubkey if self.wallet else None

    async def authorize_and_send(self, unit: AssembledUnit, co_signers: list[Keypair]) -> str:
        if self.wallet is None:
            raise SignerRejected("No wallet connected")
        if unit.payer != self.wallet.pubkey:
            raise SignerRejected(f"Unit fee payer {unit.payer} is not the connected wallet")

        transaction = sign_unit(unit, [self.wallet.keypair, *co_signers])
        logger.info(f"Signed unit with {1 + len(co_signers)} key(s), sending")
        return await self.client.send_raw_transaction(
            bytes(transaction),
            skip_preflight=self.skip_preflight,
            max_retries=self.max_retries,
        )


class PromptingSigner(Signer):
    """Asks for approval before delegating to another signer."""

    def __init__(self, inner: Signer, prompt: Callable[[str], str] = input):
        self.inner = inner
        self.prompt = prompt

    @property
    def identity(self) -> Pubkey | None:
        return self.inner.identity

    async def authorize_and_send(self, unit: AssembledUnit, co_signers: list[Keypair]) -> str:
        question = (
            f"Approve transaction with {len(unit.instructions)} instruction(s) "
            f"paid by {unit.payer}? [y/N] "
        )
        try:
            answer = await asyncio.to_thread(self.prompt, question)
        except EOFError:
            raise SignerRejected("No approval received") from None
        if answer.strip().lower() not in ("y", "yes"):
            raise SignerRejected("User rejected the request")
        return await self.inner.authorize_and_send(unit, co_signers)
