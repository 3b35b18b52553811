# heliuskit

Tools for Solana accounts and an asyncio client for an enhanced websocket that streams transaction and account updates.

- `heliuskit.keys` covers base58 encoding (`b58encode`, `b58decode`), `Pubkey` with program-derived addresses, `Keypair`, `is_valid_solana_address` and `make_keypairs`.
- `heliuskit.numbers` provides `deserialize_str_to_number`, which reads a JSON number or a string that holds one.
- `heliuskit.collection_authority` finds collection metadata and authority record accounts. It also builds the instructions that approve or revoke a collection authority.
- `heliuskit.websocket` provides `EnhancedWebsocket`, `Subscription`, `EnhancedWebsocketError` and `WebsocketClosedError`.

## Install

```
pip install heliuskit
```

## Addresses and keypairs

```python
from heliuskit.keys import Pubkey, is_valid_solana_address, make_keypairs

is_valid_solana_address("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")  # True
is_valid_solana_address("TooShort")                                     # False

keypairs = make_keypairs(3)
owner = keypairs[0].pubkey()
signature = keypairs[0].sign(b"hello")   # 64-byte ed25519 signature

program = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
address, bump = Pubkey.find_program_address([b"seed", bytes(owner)], program)
```

An address is valid when it is 32 to 44 characters long and decodes to exactly 32 bytes. `Pubkey.from_string` raises `ValueError` for anything else.

`find_program_address` tries bump seeds from 255 down to 0. It returns the first address that is off the ed25519 curve. There can be at most 16 seeds, and each seed can be at most 32 bytes long.

## Numbers from JSON

```python
from heliuskit.numbers import deserialize_str_to_number

deserialize_str_to_number("2")     # 2
deserialize_str_to_number("1.5")   # 1.5
deserialize_str_to_number(7)       # 7
```

Strings must follow JSON number syntax. Integers come back as `int`, and numbers with a fraction or exponent come back as `float`. The function raises `ValueError` for:

- booleans
- non-finite values
- malformed strings
- any other type

## Collection authority

```python
from heliuskit.collection_authority import (
    TOKEN_METADATA_PROGRAM_ID,
    delegate_collection_authority_instruction,
    revoke_collection_authority_instruction,
)
from heliuskit.keys import Keypair

update_authority = Keypair.generate()
collection_mint = Keypair.generate().pubkey()
delegate = Keypair.generate().pubkey()

approve = delegate_collection_authority_instruction(
    collection_mint, delegate, update_authority, update_authority.pubkey()
)
revoke = revoke_collection_authority_instruction(collection_mint, delegate, update_authority)

assert approve.program_id == TOKEN_METADATA_PROGRAM_ID
for meta in approve.accounts:
    print(meta.pubkey, meta.is_signer, meta.is_writable)
```

An `Instruction` holds `program_id`, `accounts` (a list of `AccountMeta`) and `data`, which is the one-byte instruction discriminator. The functions build instructions only. They do not sign or send transactions.

## Enhanced websocket

```python
import asyncio
from heliuskit.websocket import ENHANCED_WEBSOCKET_URL, EnhancedWebsocket

async def main():
    api_key = "placeholder"
    async with await EnhancedWebsocket.connect(ENHANCED_WEBSOCKET_URL + api_key) as ws:
        subscription = await ws.transaction_subscribe(
            {"accountInclude": ["BtsmiEEvnSuUnKxqXj2PZRYpPJAc7C34mGz8gtJ1DAaH"]},
            {"commitment": "confirmed"},
        )
        async for notification in subscription:
            print(notification)
            break
        await subscription.unsubscribe()

asyncio.run(main())
```

- **Subscribing.** `transaction_subscribe(filter, options)` and `account_subscribe(pubkey, config=None)` each return a `Subscription`. You iterate over it with `async for`.
  - Notifications arrive as the decoded JSON `result` objects.
  - An account notification must carry `context` and `value`.
  - Notifications that fail that check are logged and skipped.
- **Ending a subscription.** Iteration stops after `unsubscribe()` or when the connection closes.
- **Keep-alive.** The client pings the server after 10 seconds without traffic.
- **Node version.** `set_node_version` records a `semver.Version`, or a string that parses as one. You read it back from `node_version`.
- **Shutting down.** `shutdown()` (also called on leaving the `async with` block) sends a normal close. It then re-raises any error that stopped the client.

Errors:

- `EnhancedWebsocketError` is raised when the connection cannot be opened, when the server rejects a subscription, or when the server sends malformed JSON-RPC.
- `WebsocketClosedError` is raised when a subscription is requested on a closed connection, or when the connection closes before the server answers.

## What is not included

- There is no client for the HTTP API: no webhook management and no RPC calls.
- Notifications are not converted into typed objects.

## Tests

```
pip install heliuskit[test]
pytest
```