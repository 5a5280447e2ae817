"""
Syntactic validation of Solana account addresses.
"""

import base58
from solders.pubkey import Pubkey

from launchpad.core.errors import InvalidAddress

# 32 bytes in base58 is 32..44 characters
MIN_ADDRESS_LENGTH = 32
MAX_ADDRESS_LENGTH = 44
PUBKEY_BYTES = 32


def parse_address(raw: str) -> Pubkey:
    """Parse an externally supplied base58 address into a Pubkey.

    Purely syntactic: no network call is made, so a valid result says nothing
    about whether the account exists.

    Raises:
        InvalidAddress: Wrong type, length or encoding
    """
    if not isinstance(raw, str):
        raise InvalidAddress(f"Address must be a string, got {type(raw).__name__}")

    candidate = raw.strip()
    if not MIN_ADDRESS_LENGTH <= len(candidate) <= MAX_ADDRESS_LENGTH:
        raise InvalidAddress(
            f"Address must be {MIN_ADDRESS_LENGTH}-{MAX_ADDRESS_LENGTH} characters, "
            f"got {len(candidate)}"
        )

    try:
        decoded = base58.b58decode(candidate)
    except ValueError:
        raise InvalidAddress(f"Address is not valid base58: {candidate}") from None

    if len(decoded) != PUBKEY_BYTES:
        raise InvalidAddress(
            f"Address decodes to {len(decoded)} bytes, expected {PUBKEY_BYTES}: {candidate}"
        )
    return Pubkey.from_bytes(decoded)

