"""
Interfaces for the collaborators the launchpad core depends on.

The core never talks to an RPC node or a wallet directly. It receives a
LedgerReader for queries and a Signer for authorization and broadcast, so it
can be exercised against in-memory fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey

if TYPE_CHECKING:
    from launchpad.tokens.assembler import AssembledUnit


@dataclass(frozen=True)
class FreshnessToken:
    """Recent blockhash and the last block height at which it is accepted."""
    blockhash: Hash
    last_valid_block_height: int


@dataclass(frozen=True)
class SignatureStatus:
    """Confirmed status of a submitted unit. `error` is None on success."""
    error: str | None = None


@dataclass(frozen=True)
class RawHoldingAccount:
    """Undecoded token account as returned by the node."""
    pubkey: Pubkey
    data: bytes


@dataclass(frozen=True)
class AccountRecord:
    """Minimal account info: owning program and raw data."""
    owner: Pubkey
    lamports: int
    data: bytes


class LedgerReader(ABC):
    """Read access to ledger state."""

    @abstractmethod
    async def get_freshness_token(self) -> FreshnessToken:
        """Get a recent blockhash to stamp an assembled unit with."""
        pass

    @abstractmethod
    async def get_minimum_rent_exempt_balance(self, size: int) -> int:
        """Get lamports needed for an account of `size` bytes to be rent exempt."""
        pass

    @abstractmethod
    async def get_account_info(self, account: Pubkey) -> AccountRecord | None:
        """Get an account, or None when it does not exist."""
        pass

    @abstractmethod
    async def get_holding_accounts(self, owner: Pubkey) -> list[RawHoldingAccount]:
        """Get all token accounts owned by `owner`."""
        pass

    @abstractmethod
    async def confirm(self, signature: str) -> SignatureStatus | None:
        """Get the status of a submitted unit, or None while still pending."""
        pass

    @abstractmethod
    async def get_block_height(self) -> int:
        """Get the current block height."""
        pass


class Signer(ABC):
    """The connected wallet: authorizes and broadcasts assembled units."""

    @property
    @abstractmethod
    def identity(self) -> Pubkey | None:
        """Public key of the connected wallet, None when disconnected."""
        pass

    @abstractmethod
    async def authorize_and_send(
        self, unit: "AssembledUnit", co_signers: list[Keypair]
    ) -> str:
        """Sign `unit` (together with `co_signers`) and broadcast it.

        Returns:
            Transaction signature

        Raises:
            SignerRejected: The wallet or its user declined
            NetworkFailure: The unit could not be sent
            ExecutionRejected: The node refused the unit in preflight
        """
        pass
