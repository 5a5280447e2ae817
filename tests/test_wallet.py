import asyncio

import base58
import pytest
from solders.keypair import Keypair
from solders.transaction import Transaction

from launchpad.core.errors import ExecutionRejected, SignerRejected
from launchpad.core.wallet import KeypairSigner, PromptingSigner, Wallet, sign_unit
from launchpad.tokens.assembler import assemble
from launchpad.tokens.instruction_builder import build_mint_creation
from launchpad.tokens.models import TokenMintSpec

MINT = Keypair.from_seed(bytes([3] * 32))


class RecordingClient:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def send_raw_transaction(self, transaction, skip_preflight=False, max_retries=3):
        if self.error is not None:
            raise self.error
        self.sent.append((transaction, skip_preflight, max_retries))
        return str(Transaction.from_bytes(transaction).signatures[0])


def _creation_unit(ledger, payer):
    spec = TokenMintSpec("Demo", "DMO", 6, 1000)
    instructions = build_mint_creation(spec, payer.pubkey(), MINT.pubkey(), 1_461_600)
    return assemble(instructions, payer.pubkey(), asyncio.run(ledger.get_freshness_token()))


def test_wallet_loads_base58_private_key(payer):
    wallet = Wallet(base58.b58encode(bytes(payer)).decode())

    assert wallet.pubkey == payer.pubkey()
    assert str(payer) not in repr(wallet)


def test_wallet_rejects_garbage_key():
    with pytest.raises(ValueError):
        Wallet("not a key")


def test_sign_unit_ignores_unrelated_keys(ledger, payer, recipient):
    unit = _creation_unit(ledger, payer)

    transaction = sign_unit(unit, [recipient, payer, MINT])

    assert len(transaction.signatures) == 2
    transaction.verify()


def test_keypair_signer_signs_and_sends(ledger, payer):
    client = RecordingClient()
    signer = KeypairSigner(Wallet(base58.b58encode(bytes(payer)).decode()), client, skip_preflight=True)
    unit = _creation_unit(ledger, payer)

    signature = asyncio.run(signer.authorize_and_send(unit, [MINT]))

    raw, skip_preflight, _ = client.sent[0]
    assert skip_preflight is True
    assert str(Transaction.from_bytes(raw).signatures[0]) == signature


def test_keypair_signer_without_wallet(ledger, payer):
    signer = KeypairSigner(None, RecordingClient())

    assert signer.identity is None
    with pytest.raises(SignerRejected):
        asyncio.run(signer.authorize_and_send(_creation_unit(ledger, payer), [MINT]))


def test_keypair_signer_refuses_foreign_payer(ledger, payer, recipient):
    signer = KeypairSigner(Wallet(base58.b58encode(bytes(recipient)).decode()), RecordingClient())

    with pytest.raises(SignerRejected):
        asyncio.run(signer.authorize_and_send(_creation_unit(ledger, payer), [MINT]))


def test_keypair_signer_passes_preflight_rejection(ledger, payer):
    client = RecordingClient(error=ExecutionRejected("custom program error: 0x1"))
    signer = KeypairSigner(Wallet(base58.b58encode(bytes(payer)).decode()), client)

    with pytest.raises(ExecutionRejected):
        asyncio.run(signer.authorize_and_send(_creation_unit(ledger, payer), [MINT]))


@pytest.mark.parametrize("answer", ["n", "", "no", "maybe"])
def test_prompting_signer_refusal(ledger, signer, payer, answer):
    prompting = PromptingSigner(signer, prompt=lambda question: answer)

    with pytest.raises(SignerRejected):
        asyncio.run(prompting.authorize_and_send(_creation_unit(ledger, payer), [MINT]))
    assert signer.sent == []


def test_prompting_signer_approval(ledger, signer, payer):
    questions = []

    def prompt(question):
        questions.append(question)
        return "Y"

    prompting = PromptingSigner(signer, prompt=prompt)
    asyncio.run(prompting.authorize_and_send(_creation_unit(ledger, payer), [MINT]))

    assert prompting.identity == payer.pubkey()
    assert "4 instruction(s)" in questions[0]
    assert len(signer.sent) == 1


def test_prompting_signer_treats_closed_input_as_refusal(ledger, signer, payer):
    def closed(question):
        raise EOFError

    prompting = PromptingSigner(signer, prompt=closed)

    with pytest.raises(SignerRejected):
        asyncio.run(prompting.authorize_and_send(_creation_unit(ledger, payer), [MINT]))
    assert signer.sent == []
