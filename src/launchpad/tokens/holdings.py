"""
Reading and decoding the token accounts owned by a wallet.
"""

import struct

from solders.pubkey import Pubkey

from launchpad.core.errors import NetworkFailure, QueryUnavailable
from launchpad.core.pubkeys import (
    TOKEN_ACCOUNT_AMOUNT_OFFSET,
    TOKEN_ACCOUNT_MINT_OFFSET,
)
from launchpad.interfaces.core import LedgerReader, RawHoldingAccount
from launchpad.tokens.models import HoldingRecord
from launchpad.utils.logger import get_logger

logger = get_logger(__name__)

_MIN_ACCOUNT_DATA = TOKEN_ACCOUNT_AMOUNT_OFFSET + 8


def decode_holding(raw: RawHoldingAccount) -> HoldingRecord | None:
    """Decode mint and balance from SPL token account data.

    Layout: Mint(0-32) | Owner(32-64) | Amount(64-72, u64 little-endian)

    Returns:
        HoldingRecord, or None when the data is too short to be a token account
    """
    data = bytes(raw.data)
    if len(data) < _MIN_ACCOUNT_DATA:
        return None

    mint = Pubkey.from_bytes(
        data[TOKEN_ACCOUNT_MINT_OFFSET:TOKEN_ACCOUNT_MINT_OFFSET + 32]
    )
    (amount,) = struct.unpack_from("<Q", data, TOKEN_ACCOUNT_AMOUNT_OFFSET)
    return HoldingRecord(mint=mint, balance_base_units=amount, account=raw.pubkey)


async def fetch_holdings(ledger: LedgerReader, owner: Pubkey) -> frozenset[HoldingRecord]:
    """Get all token holdings of `owner`.

    An owner without token accounts yields an empty set.

    Raises:
        QueryUnavailable: The node could not be reached
    """
    try:
        raw_accounts = await ledger.get_holding_accounts(owner)
    except QueryUnavailable:
        raise
    except NetworkFailure as e:
        raise QueryUnavailable(f"Could not read holdings of {owner}: {e!s}") from e

    records = set()
    for raw in raw_accounts:
        record = decode_holding(raw)
        if record is None:
            logger.warning(
                f"Skipping account {raw.pubkey}: {len(raw.data)} bytes is not a token account"
            )
            continue
        records.add(record)

    logger.info(f"Found {len(records)} token account(s) for {owner}")
    return frozenset(records)


class HoldingsBoard:
    """The displayed holdings set, replaced whole on each successful refresh.

    Every refresh takes a sequence number when it starts. A result is only
    applied if no later-started refresh has already been applied, so a slow
    old fetch never overwrites fresher data.
    """

    def __init__(self, ledger: LedgerReader):
        self.ledger = ledger
        self._holdings: frozenset[HoldingRecord] = frozenset()
        self._owner: Pubkey | None = None
        self._issued = 0
        self._applied = 0

    @property
    def holdings(self) -> frozenset[HoldingRecord]:
        return self._holdings

    @property
    def owner(self) -> Pubkey | None:
        return self._owner

    async def refresh(self, owner: Pubkey) -> frozenset[HoldingRecord]:
        """Fetch holdings of `owner` and publish them unless outdated.

        Returns:
            The holdings of `owner`: the displayed set when a newer refresh
            of the same owner has already been applied, else this fetch

        Raises:
            QueryUnavailable: The node could not be reached
        """
        self._issued += 1
        sequence = self._issued

        records = await fetch_holdings(self.ledger, owner)

        # no await between the check and the publish
        if sequence > self._applied:
            self._applied = sequence
            self._holdings = records
            self._owner = owner
        else:
            logger.info(
                f"Discarding holdings fetch #{sequence}; #{self._applied} is newer"
            )
            if self._owner != owner:
                return records
        return self._holdings
