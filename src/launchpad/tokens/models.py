"""
Data model for token creation, transfers and holdings.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from solders.pubkey import Pubkey

from launchpad.core.errors import FailureKind


@dataclass(frozen=True)
class TokenMintSpec:
    """User input for a new token mint. Consumed once per creation attempt."""
    name: str
    symbol: str
    decimals: int
    initial_supply_whole: int | float | str | Decimal
    freeze_authority_enabled: bool = False


@dataclass(frozen=True)
class TransferRequest:
    """Raw transfer input as entered by the user."""
    mint: Pubkey | None
    recipient_address_raw: str
    amount_whole: int | float | str | Decimal


@dataclass(frozen=True)
class ValidatedTransfer:
    """Transfer input after address and amount validation."""
    mint: Pubkey
    recipient: Pubkey
    amount_base_units: int
    decimals: int


@dataclass(frozen=True)
class HoldingRecord:
    """One token account owned by the connected identity."""
    mint: Pubkey
    balance_base_units: int
    account: Pubkey


@dataclass(frozen=True)
class SubmissionSuccess:
    signature: str
    explorer_url: str

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "signature": self.signature,
            "explorer_url": self.explorer_url,
        }


@dataclass(frozen=True)
class SubmissionFailure:
    kind: FailureKind
    reason: str

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "kind": self.kind.value,
            "reason": self.reason,
        }


SubmissionOutcome = SubmissionSuccess | SubmissionFailure


@dataclass(frozen=True)
class CreateTokenResult:
    """Outcome of a token creation plus the address of the new mint.

    `mint` is set as soon as the mint key pair exists, so a timed-out
    creation can still be looked up on the explorer.
    """
    outcome: SubmissionOutcome
    spec: TokenMintSpec
    mint: Pubkey | None = None
    mint_explorer_url: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            **self.outcome.to_dict(),
            "name": self.spec.name,
            "symbol": self.spec.symbol,
            "supply": str(self.spec.initial_supply_whole),
            "decimals": self.spec.decimals,
            "freeze_authority": self.spec.freeze_authority_enabled,
            "mint": str(self.mint) if self.mint else None,
            "mint_explorer_url": self.mint_explorer_url,
        }
