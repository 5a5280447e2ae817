"""
In-memory ledger and wallet used across the test suite.
"""

import struct

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from launchpad.core.errors import SignerRejected
from launchpad.core.pubkeys import MINT_SIZE, TOKEN_ACCOUNT_SIZE, SystemAddresses
from launchpad.core.wallet import sign_unit
from launchpad.interfaces.core import (
    AccountRecord,
    FreshnessToken,
    LedgerReader,
    RawHoldingAccount,
    SignatureStatus,
    Signer,
)

RENT_EXEMPT_MINT = 1_461_600


def mint_account_data(decimals: int) -> bytes:
    data = bytearray(MINT_SIZE)
    data[44] = decimals
    data[45] = 1  # is_initialized
    return bytes(data)


def token_account_data(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    data = bytearray(TOKEN_ACCOUNT_SIZE)
    data[0:32] = bytes(mint)
    data[32:64] = bytes(owner)
    data[64:72] = struct.pack("<Q", amount)
    return bytes(data)


class FakeLedger(LedgerReader):
    """Ledger reader backed by dictionaries; records every call by name."""

    def __init__(self):
        self.calls: list[str] = []
        self.blockhash = Hash.new_unique()
        self.block_height = 100
        self.last_valid_block_height = 250
        self.accounts: dict[Pubkey, AccountRecord] = {}
        self.holdings: dict[Pubkey, list[RawHoldingAccount]] = {}
        self.statuses: list = []
        self.holdings_error: Exception | None = None

    def add_mint(self, mint: Pubkey, decimals: int) -> None:
        self.accounts[mint] = AccountRecord(
            owner=SystemAddresses.TOKEN_PROGRAM,
            lamports=RENT_EXEMPT_MINT,
            data=mint_account_data(decimals),
        )

    def add_token_account(self, account: Pubkey, mint: Pubkey, owner: Pubkey, amount: int) -> None:
        data = token_account_data(mint, owner, amount)
        self.accounts[account] = AccountRecord(
            owner=SystemAddresses.TOKEN_PROGRAM, lamports=2_039_280, data=data
        )
        self.holdings.setdefault(owner, []).append(RawHoldingAccount(pubkey=account, data=data))

    async def get_freshness_token(self) -> FreshnessToken:
        self.calls.append("get_freshness_token")
        return FreshnessToken(
            blockhash=self.blockhash,
            last_valid_block_height=self.last_valid_block_height,
        )

    async def get_minimum_rent_exempt_balance(self, size: int) -> int:
        self.calls.append("get_minimum_rent_exempt_balance")
        return RENT_EXEMPT_MINT

    async def get_account_info(self, account: Pubkey) -> AccountRecord | None:
        self.calls.append("get_account_info")
        return self.accounts.get(account)

    async def get_holding_accounts(self, owner: Pubkey) -> list[RawHoldingAccount]:
        self.calls.append("get_holding_accounts")
        if self.holdings_error is not None:
            raise self.holdings_error
        return list(self.holdings.get(owner, []))

    async def confirm(self, signature: str) -> SignatureStatus | None:
        self.calls.append("confirm")
        if not self.statuses:
            return SignatureStatus()
        status = self.statuses.pop(0)
        if isinstance(status, Exception):
            raise status
        return status

    async def get_block_height(self) -> int:
        self.calls.append("get_block_height")
        return self.block_height


class FakeSigner(Signer):
    """Wallet that signs locally and records what it was asked to send."""

    def __init__(self, keypair: Keypair | None):
        self.keypair = keypair
        self.sent: list[tuple] = []
        self.error: Exception | None = None

    @property
    def identity(self) -> Pubkey | None:
        return self.keypair.pubkey() if self.keypair else None

    async def authorize_and_send(self, unit, co_signers: list[Keypair]) -> str:
        if self.error is not None:
            raise self.error
        if self.keypair is None:
            raise SignerRejected("No wallet connected")
        transaction = sign_unit(unit, [self.keypair, *co_signers])
        self.sent.append((unit, list(co_signers)))
        return str(transaction.signatures[0])


@pytest.fixture
def payer() -> Keypair:
    return Keypair.from_seed(bytes([7] * 32))


@pytest.fixture
def recipient() -> Keypair:
    return Keypair.from_seed(bytes([9] * 32))


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def signer(payer) -> FakeSigner:
    return FakeSigner(payer)
