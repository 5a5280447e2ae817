import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from launchpad.core.errors import InvalidAddress
from launchpad.tokens.addresses import parse_address

TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def test_accepts_known_good_address():
    assert parse_address(TOKEN_PROGRAM) == Pubkey.from_string(TOKEN_PROGRAM)


def test_accepts_system_program_and_generated_keys():
    assert parse_address("11111111111111111111111111111111") == Pubkey.default()
    pubkey = Keypair().pubkey()
    assert parse_address(str(pubkey)) == pubkey


def test_strips_surrounding_whitespace():
    assert parse_address(f"  {TOKEN_PROGRAM}\n") == Pubkey.from_string(TOKEN_PROGRAM)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "abc",
        TOKEN_PROGRAM[:-12],  # too short
        TOKEN_PROGRAM + "A",  # too long
        "0" + TOKEN_PROGRAM[1:],  # '0' is not in the base58 alphabet
        "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5Dl",  # 'l' neither
        "z" * 44,  # decodes to 33 bytes
        "0x" + "ab" * 20,
    ],
)
def test_rejects_malformed_addresses(raw):
    with pytest.raises(InvalidAddress):
        parse_address(raw)


def test_rejects_non_strings():
    with pytest.raises(InvalidAddress):
        parse_address(12345)
