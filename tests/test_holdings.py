import asyncio

import pytest
from solders.keypair import Keypair

from conftest import FakeLedger, token_account_data
from launchpad.core.errors import NetworkFailure, QueryUnavailable
from launchpad.interfaces.core import RawHoldingAccount
from launchpad.tokens.holdings import HoldingsBoard, decode_holding, fetch_holdings
from launchpad.tokens.models import HoldingRecord

MINT_A = Keypair.from_seed(bytes([21] * 32)).pubkey()
MINT_B = Keypair.from_seed(bytes([22] * 32)).pubkey()
ACCOUNT_1 = Keypair.from_seed(bytes([31] * 32)).pubkey()
ACCOUNT_2 = Keypair.from_seed(bytes([32] * 32)).pubkey()


def test_decodes_mint_and_balance(payer):
    raw = RawHoldingAccount(ACCOUNT_1, token_account_data(MINT_A, payer.pubkey(), 2**64 - 1))

    record = decode_holding(raw)

    assert record == HoldingRecord(mint=MINT_A, balance_base_units=2**64 - 1, account=ACCOUNT_1)
    assert isinstance(record.balance_base_units, int)


def test_short_data_is_not_a_holding():
    assert decode_holding(RawHoldingAccount(ACCOUNT_1, b"\x00" * 71)) is None


def test_owner_without_accounts_has_empty_holdings(ledger, payer):
    holdings = asyncio.run(fetch_holdings(ledger, payer.pubkey()))

    assert holdings == frozenset()


def test_fetches_all_accounts(ledger, payer):
    ledger.add_token_account(ACCOUNT_1, MINT_A, payer.pubkey(), 5)
    ledger.add_token_account(ACCOUNT_2, MINT_B, payer.pubkey(), 0)
    ledger.holdings[payer.pubkey()].append(RawHoldingAccount(ACCOUNT_2, b"junk"))

    holdings = asyncio.run(fetch_holdings(ledger, payer.pubkey()))

    assert holdings == {
        HoldingRecord(MINT_A, 5, ACCOUNT_1),
        HoldingRecord(MINT_B, 0, ACCOUNT_2),
    }


def test_two_accounts_of_one_mint_stay_distinct(ledger, payer):
    ledger.add_token_account(ACCOUNT_1, MINT_A, payer.pubkey(), 5)
    ledger.add_token_account(ACCOUNT_2, MINT_A, payer.pubkey(), 5)

    assert len(asyncio.run(fetch_holdings(ledger, payer.pubkey()))) == 2


@pytest.mark.parametrize("error", [QueryUnavailable("down"), NetworkFailure("down")])
def test_transport_failure_is_query_unavailable(ledger, payer, error):
    ledger.holdings_error = error

    with pytest.raises(QueryUnavailable):
        asyncio.run(fetch_holdings(ledger, payer.pubkey()))


def test_refresh_replaces_whole_set(ledger, payer):
    board = HoldingsBoard(ledger)
    ledger.add_token_account(ACCOUNT_1, MINT_A, payer.pubkey(), 5)
    asyncio.run(board.refresh(payer.pubkey()))

    ledger.holdings[payer.pubkey()] = [
        RawHoldingAccount(ACCOUNT_2, token_account_data(MINT_B, payer.pubkey(), 9))
    ]
    holdings = asyncio.run(board.refresh(payer.pubkey()))

    assert holdings == {HoldingRecord(MINT_B, 9, ACCOUNT_2)}
    assert board.holdings == holdings
    assert board.owner == payer.pubkey()


def test_back_to_back_refreshes_are_identical(ledger, payer):
    board = HoldingsBoard(ledger)
    ledger.add_token_account(ACCOUNT_1, MINT_A, payer.pubkey(), 5)
    ledger.add_token_account(ACCOUNT_2, MINT_B, payer.pubkey(), 7)

    first = asyncio.run(board.refresh(payer.pubkey()))
    second = asyncio.run(board.refresh(payer.pubkey()))

    assert first == second


def test_failed_refresh_keeps_previous_set(ledger, payer):
    board = HoldingsBoard(ledger)
    ledger.add_token_account(ACCOUNT_1, MINT_A, payer.pubkey(), 5)
    before = asyncio.run(board.refresh(payer.pubkey()))

    ledger.holdings_error = QueryUnavailable("down")
    with pytest.raises(QueryUnavailable):
        asyncio.run(board.refresh(payer.pubkey()))

    assert board.holdings == before


class GatedLedger(FakeLedger):
    """Holds each holdings query until its gate is opened."""

    def __init__(self, responses):
        super().__init__()
        self.responses = responses
        self.gates = []

    async def get_holding_accounts(self, owner):
        index = len(self.gates)
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return self.responses[index]


def test_older_fetch_finishing_late_is_discarded(payer):
    old = [RawHoldingAccount(ACCOUNT_1, token_account_data(MINT_A, payer.pubkey(), 1))]
    new = [RawHoldingAccount(ACCOUNT_1, token_account_data(MINT_A, payer.pubkey(), 2))]
    ledger = GatedLedger([old, new])
    board = HoldingsBoard(ledger)

    async def scenario():
        first = asyncio.create_task(board.refresh(payer.pubkey()))
        second = asyncio.create_task(board.refresh(payer.pubkey()))
        while len(ledger.gates) < 2:
            await asyncio.sleep(0)

        ledger.gates[1].set()
        newer = await second
        ledger.gates[0].set()
        older = await first
        return newer, older

    newer, older = asyncio.run(scenario())

    expected = {HoldingRecord(MINT_A, 2, ACCOUNT_1)}
    assert newer == expected
    assert older == expected
    assert board.holdings == expected


def test_discarded_fetch_still_answers_for_its_own_owner(payer, recipient):
    theirs = [RawHoldingAccount(ACCOUNT_2, token_account_data(MINT_B, recipient.pubkey(), 77))]
    ledger = GatedLedger([[], theirs])
    board = HoldingsBoard(ledger)

    async def scenario():
        mine = asyncio.create_task(board.refresh(payer.pubkey()))
        other = asyncio.create_task(board.refresh(recipient.pubkey()))
        while len(ledger.gates) < 2:
            await asyncio.sleep(0)

        ledger.gates[1].set()
        await other
        ledger.gates[0].set()
        return await mine

    mine = asyncio.run(scenario())

    assert mine == frozenset()
    assert board.owner == recipient.pubkey()
    assert board.holdings == {HoldingRecord(MINT_B, 77, ACCOUNT_2)}
