"""Instructions that delegate or revoke a token-metadata collection authority."""

from __future__ import annotations

from dataclasses import dataclass

from .keys import Keypair, Pubkey

TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
SYSTEM_PROGRAM_ID = Pubkey(bytes(32))

_APPROVE_COLLECTION_AUTHORITY = 23
_REVOKE_COLLECTION_AUTHORITY = 24


@dataclass(frozen=True)
class AccountMeta:
    """An account referenced by an instruction."""

    pubkey: Pubkey
    is_signer: bool
    is_writable: bool

    @classmethod
    def writable(cls, pubkey: Pubkey, is_signer: bool) -> "AccountMeta":
        return cls(pubkey, is_signer, True)

    @classmethod
    def readonly(cls, pubkey: Pubkey, is_signer: bool) -> "AccountMeta":
        return cls(pubkey, is_signer, False)


@dataclass(frozen=True)
class Instruction:
    """A program instruction: target program, accounts and data."""

    program_id: Pubkey
    accounts: list[AccountMeta]
    data: bytes


def get_collection_authority_record(collection_mint: Pubkey, collection_authority: Pubkey) -> Pubkey:
    """Address of the record that grants an authority over a collection."""
    address, _ = Pubkey.find_program_address(
        [
            b"metadata",
            bytes(TOKEN_METADATA_PROGRAM_ID),
            bytes(collection_mint),
            b"collection_authority",
            bytes(collection_authority),
        ],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return address


def get_collection_metadata_account(collection_mint: Pubkey) -> Pubkey:
    """Address of the metadata account of a collection mint."""
    address, _ = Pubkey.find_program_address(
        [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(collection_mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return address


def revoke_collection_authority_instruction(
    collection_mint: Pubkey,
    collection_authority: Pubkey,
    revoke_authority_keypair: Keypair,
) -> Instruction:
    """Build the instruction that revokes a delegated collection authority."""
    accounts = [
        AccountMeta.writable(get_collection_authority_record(collection_mint, collection_authority), False),
        AccountMeta.writable(collection_authority, False),
        AccountMeta.writable(revoke_authority_keypair.pubkey(), True),
        AccountMeta.readonly(get_collection_metadata_account(collection_mint), False),
        AccountMeta.readonly(collection_mint, False),
    ]
    return Instruction(TOKEN_METADATA_PROGRAM_ID, accounts, bytes([_REVOKE_COLLECTION_AUTHORITY]))


def delegate_collection_authority_instruction(
    collection_mint: Pubkey,
    new_collection_authority: Pubkey,
    update_authority_keypair: Keypair,
    payer_pubkey: Pubkey,
) -> Instruction:
    """Build the instruction that approves a new collection authority."""
    accounts = [
        AccountMeta.writable(get_collection_authority_record(collection_mint, new_collection_authority), False),
        AccountMeta.readonly(new_collection_authority, False),
        AccountMeta.writable(update_authority_keypair.pubkey(), True),
        AccountMeta.writable(payer_pubkey, True),
        AccountMeta.readonly(get_collection_metadata_account(collection_mint), False),
        AccountMeta.readonly(collection_mint, False),
        AccountMeta.readonly(SYSTEM_PROGRAM_ID, False),
    ]
    return Instruction(TOKEN_METADATA_PROGRAM_ID, accounts, bytes([_APPROVE_COLLECTION_AUTHORITY]))