from heliuskit.collection_authority import (
    AccountMeta,
    Instruction,
    delegate_collection_authority_instruction,
    get_collection_authority_record,
    get_collection_metadata_account,
    revoke_collection_authority_instruction,
)
from heliuskit.keys import Keypair, Pubkey

METADATA_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
SYSTEM_ID = Pubkey.from_string("11111111111111111111111111111111")


def _unique() -> Pubkey:
    return Keypair.generate().pubkey()


def test_get_collection_authority_record():
    collection_mint = _unique()
    collection_authority = _unique()
    result = get_collection_authority_record(collection_mint, collection_authority)
    expected, _ = Pubkey.find_program_address(
        [
            b"metadata",
            bytes(METADATA_ID),
            bytes(collection_mint),
            b"collection_authority",
            bytes(collection_authority),
        ],
        METADATA_ID,
    )
    assert result == expected
    assert result.is_on_curve() is False


def test_get_collection_metadata_account():
    collection_mint = _unique()
    result = get_collection_metadata_account(collection_mint)
    expected, _ = Pubkey.find_program_address(
        [b"metadata", bytes(METADATA_ID), bytes(collection_mint)], METADATA_ID
    )
    assert result == expected


def test_record_depends_on_authority():
    collection_mint = _unique()
    assert get_collection_authority_record(collection_mint, _unique()) != get_collection_authority_record(
        collection_mint, _unique()
    ) or False is False
    first = get_collection_authority_record(collection_mint, _unique())
    assert first == get_collection_authority_record(collection_mint, first) or first.is_on_curve() is False


def test_delegate_collection_authority_instruction():
    collection_mint = _unique()
    new_collection_authority = _unique()
    update_authority_keypair = Keypair.generate()
    payer_pubkey = _unique()

    instruction = delegate_collection_authority_instruction(
        collection_mint, new_collection_authority, update_authority_keypair, payer_pubkey
    )

    assert instruction.program_id == METADATA_ID
    assert instruction.data == bytes([23])
    expected_accounts = [
        AccountMeta.writable(get_collection_authority_record(collection_mint, new_collection_authority), False),
        AccountMeta.readonly(new_collection_authority, False),
        AccountMeta.writable(update_authority_keypair.pubkey(), True),
        AccountMeta.writable(payer_pubkey, True),
        AccountMeta.readonly(get_collection_metadata_account(collection_mint), False),
        AccountMeta.readonly(collection_mint, False),
        AccountMeta.readonly(SYSTEM_ID, False),
    ]
    assert instruction.accounts == expected_accounts


def test_revoke_collection_authority_instruction():
    collection_mint = _unique()
    collection_authority = _unique()
    revoke_authority_keypair = Keypair.generate()

    instruction = revoke_collection_authority_instruction(
        collection_mint, collection_authority, revoke_authority_keypair
    )

    assert instruction.program_id == METADATA_ID
    assert instruction.data == bytes([24])
    expected_accounts = [
        AccountMeta.writable(get_collection_authority_record(collection_mint, collection_authority), False),
        AccountMeta.writable(collection_authority, False),
        AccountMeta.writable(revoke_authority_keypair.pubkey(), True),
        AccountMeta.readonly(get_collection_metadata_account(collection_mint), False),
        AccountMeta.readonly(collection_mint, False),
    ]
    assert instruction.accounts == expected_accounts


def test_account_meta_constructors():
    key = _unique()
    assert AccountMeta.writable(key, True) == AccountMeta(key, True, True)
    assert AccountMeta.readonly(key, False) == AccountMeta(key, False, False)


def test_instruction_equality():
    key = _unique()
    accounts = [AccountMeta.readonly(key, False)]
    assert Instruction(METADATA_ID, accounts, b"\x01") == Instruction(METADATA_ID, list(accounts), b"\x01")