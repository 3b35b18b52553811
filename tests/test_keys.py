import pytest
from nacl.signing import VerifyKey

from heliuskit.keys import (
    Keypair,
    Pubkey,
    b58decode,
    b58encode,
    is_valid_solana_address,
    make_keypairs,
)

METADATA_PROGRAM = "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"


@pytest.mark.parametrize(
    "address",
    [
        "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
        "9AhKqLR67hwapvG8SA2JFXaCshXc9nALJjpKaHZrsbkw",
        "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
    ],
)
def test_valid_addresses(address):
    assert is_valid_solana_address(address) is True


@pytest.mark.parametrize(
    "address",
    [
        "DefinitelyNotASolanaAddress",
        "12345",
        "",
        "TooShort",
        "12345678901234567890123456789012345678901234",
    ],
)
def test_invalid_addresses(address):
    assert is_valid_solana_address(address) is False


@pytest.mark.parametrize("amount", [1, 5, 10])
def test_make_keypairs_generates_correct_amount(amount):
    assert len(make_keypairs(amount)) == amount


def test_make_keypairs_are_unique():
    keys = [str(keypair.pubkey()) for keypair in make_keypairs(10)]
    assert len(set(keys)) == 10


def test_make_keypairs_zero():
    assert make_keypairs(0) == []


def test_b58_known_values():
    assert b58encode(b"hello world") == "StV1DL6CwTryKyV"
    assert b58decode("StV1DL6CwTryKyV") == b"hello world"
    assert b58encode(b"\0\0\x01") == "112"
    assert b58encode(b"") == ""


@pytest.mark.parametrize("data", [b"", b"\0", b"\0\0abc", bytes(range(40)), b"\xff" * 32])
def test_b58_round_trip(data):
    assert b58decode(b58encode(data)) == data


def test_b58_rejects_bad_character():
    with pytest.raises(ValueError):
        b58decode("0OIl")


def test_system_program_is_all_zeros():
    assert Pubkey.from_string("11111111111111111111111111111111").raw == bytes(32)
    assert str(Pubkey(bytes(32))) == "11111111111111111111111111111111"


def test_pubkey_round_trip():
    key = Pubkey.from_string(METADATA_PROGRAM)
    assert str(key) == METADATA_PROGRAM
    assert len(bytes(key)) == 32


def test_pubkey_wrong_size():
    with pytest.raises(ValueError):
        Pubkey(b"\x01" * 31)
    with pytest.raises(ValueError):
        Pubkey.from_string("TooShort")
    with pytest.raises(ValueError):
        Pubkey.from_string("1" * 45)


def test_pubkey_equality_and_hash():
    a = Pubkey.from_string(METADATA_PROGRAM)
    b = Pubkey.from_string(METADATA_PROGRAM)
    assert a == b
    assert len({a, b}) == 1


def test_is_on_curve():
    assert Pubkey(bytes(32)).is_on_curve() is True
    assert Keypair.generate().pubkey().is_on_curve() is True


def test_find_program_address_is_off_curve_and_consistent():
    program = Pubkey.from_string(METADATA_PROGRAM)
    mint = Keypair.generate().pubkey()
    seeds = [b"metadata", bytes(program), bytes(mint)]
    address, bump = Pubkey.find_program_address(seeds, program)
    assert 0 <= bump <= 255
    assert address.is_on_curve() is False
    assert Pubkey.create_program_address([*seeds, bytes([bump])], program) == address
    assert Pubkey.find_program_address(seeds, program) == (address, bump)


def test_create_program_address_limits():
    program = Pubkey.from_string(METADATA_PROGRAM)
    with pytest.raises(ValueError):
        Pubkey.create_program_address([b"x" * 33], program)
    with pytest.raises(ValueError):
        Pubkey.create_program_address([b"a"] * 17, program)


def test_seed_type_is_checked():
    program = Pubkey.from_string(METADATA_PROGRAM)
    with pytest.raises(TypeError):
        Pubkey.find_program_address(["metadata"], program)


def test_keypair_sign_verifies():
    keypair = Keypair.generate()
    signature = keypair.sign(b"message")
    assert len(signature) == 64
    assert keypair.sign(b"message") == signature
    verified = VerifyKey(bytes(keypair.pubkey())).verify(b"message", signature)
    assert verified == b"message"