"""
System addresses and constants for SPL token operations.
"""

from typing import Final

from solders.pubkey import Pubkey
from spl.token.constants import ACCOUNT_LEN, MINT_LEN

# Constants
MAX_DECIMALS: Final[int] = 9
MAX_BASE_UNITS: Final[int] = 2**64 - 1  # u64 amount field
MINT_SIZE: Final[int] = MINT_LEN
TOKEN_ACCOUNT_SIZE: Final[int] = ACCOUNT_LEN

# Byte offsets inside the SPL mint and token account layouts
MINT_DECIMALS_OFFSET: Final[int] = 44
TOKEN_ACCOUNT_MINT_OFFSET: Final[int] = 0
TOKEN_ACCOUNT_AMOUNT_OFFSET: Final[int] = 64

# Core system programs
SYSTEM_PROGRAM: Final[Pubkey] = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM: Final[Pubkey] = Pubkey.from_string(
    "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
)
ASSOCIATED_TOKEN_PROGRAM: Final[Pubkey] = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)

EXPLORER_URL: Final[str] = "https://explorer.solana.com"
CLUSTERS: Final[tuple[str, ...]] = ("devnet", "testnet", "mainnet-beta")


class SystemAddresses:
    """System-level Solana addresses used by the launchpad."""

    SYSTEM_PROGRAM = SYSTEM_PROGRAM
    TOKEN_PROGRAM = TOKEN_PROGRAM
    ASSOCIATED_TOKEN_PROGRAM = ASSOCIATED_TOKEN_PROGRAM


def explorer_url(kind: str, value: object, cluster: str = "devnet") -> str:
    """Build a Solana Explorer link.

    Args:
        kind: "tx" for a signature, "address" for an account
        value: Signature or Pubkey (anything with a base58 str())
        cluster: Target cluster name

    Returns:
        Explorer URL
    """
    url = f"{EXPLORER_URL}/{kind}/{value}"
    if cluster != "mainnet-beta":
        url += f"?cluster={cluster}"
    return url
