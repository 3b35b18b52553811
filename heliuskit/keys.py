"""Base58 text, public keys, keypairs and program-derived addresses."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Iterable, Union

from nacl.signing import SigningKey

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {char: position for position, char in enumerate(_ALPHABET)}

PUBKEY_BYTES = 32
MAX_SEEDS = 16
MAX_SEED_LEN = 32
_MAX_BASE58_LEN = 44
_PDA_MARKER = b"ProgramDerivedAddress"

# Curve parameters for edwards25519.
_P = 2**255 - 19
_D = (-121665 * pow(121666, -1, _P)) % _P


def b58encode(data: bytes) -> str:
    """Encode bytes as base58 text using the Bitcoin alphabet."""
    data = bytes(data)
    stripped = data.lstrip(b"\0")
    leading = len(data) - len(stripped)
    number = int.from_bytes(stripped, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_ALPHABET[remainder])
    return "1" * leading + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    """Decode base58 text; raise ValueError on characters outside the alphabet."""
    number = 0
    for char in text:
        try:
            number = number * 58 + _INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {char!r}") from None
    leading = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\0" * leading + body


Seed = Union[bytes, bytearray, memoryview, "Pubkey"]


@dataclass(frozen=True)
class Pubkey:
    """A 32-byte account address."""

    raw: bytes

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != PUBKEY_BYTES:
            raise ValueError(f"a public key is {PUBKEY_BYTES} bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return b58encode(self.raw)

    def __repr__(self) -> str:
        return f"Pubkey({self})"

    @classmethod
    def from_string(cls, text: str) -> "Pubkey":
        """Parse a base58 address; raise ValueError if it is not a valid key."""
        if len(text) > _MAX_BASE58_LEN:
            raise ValueError("string decoded to wrong size for pubkey")
        try:
            raw = b58decode(text)
        except ValueError as exc:
            raise ValueError("invalid base58 string for pubkey") from exc
        if len(raw) != PUBKEY_BYTES:
            raise ValueError("string decoded to wrong size for pubkey")
        return cls(raw)

    def is_on_curve(self) -> bool:
        """Whether the bytes decompress to a point on the ed25519 curve."""
        y = int.from_bytes(self.raw, "little") & ((1 << 255) - 1)
        y %= _P
        y2 = y * y % _P
        u = (y2 - 1) % _P
        v = (_D * y2 + 1) % _P
        if u == 0:
            return True
        ratio = u * pow(v, -1, _P) % _P
        return pow(ratio, (_P - 1) // 2, _P) == 1

    @classmethod
    def create_program_address(cls, seeds: Iterable[Seed], program_id: "Pubkey") -> "Pubkey":
        """Derive an off-curve address from seeds and a program id."""
        seed_bytes = [_seed_to_bytes(seed) for seed in seeds]
        if len(seed_bytes) > MAX_SEEDS or any(len(seed) > MAX_SEED_LEN for seed in seed_bytes):
            raise ValueError("length of the seed is too long for address generation")
        hasher = hashlib.sha256()
        for seed in seed_bytes:
            hasher.update(seed)
        hasher.update(bytes(program_id))
        hasher.update(_PDA_MARKER)
        candidate = cls(hasher.digest())
        if candidate.is_on_curve():
            raise _InvalidSeeds("provided seeds do not result in a valid address")
        return candidate

    @classmethod
    def find_program_address(cls, seeds: Iterable[Seed], program_id: "Pubkey") -> tuple["Pubkey", int]:
        """Find the first valid program address and its bump seed, searching from 255 down."""
        seed_bytes = [_seed_to_bytes(seed) for seed in seeds]
        for bump in range(255, -1, -1):
            try:
                address = cls.create_program_address([*seed_bytes, bytes([bump])], program_id)
            except _InvalidSeeds:
                continue
            return address, bump
        raise ValueError("unable to find a viable program address bump seed")


class _InvalidSeeds(ValueError):
    pass


def _seed_to_bytes(seed: Seed) -> bytes:
    if isinstance(seed, (bytes, bytearray, memoryview, Pubkey)):
        return bytes(seed)
    raise TypeError(f"seeds must be bytes-like, got {type(seed).__name__}")


class Keypair:
    """An ed25519 signing keypair."""

    def __init__(self, signing_key: SigningKey) -> None:
        self._signing_key = signing_key

    @classmethod
    def generate(cls) -> "Keypair":
        """Create a keypair from fresh randomness."""
        return cls(SigningKey.generate())

    def pubkey(self) -> Pubkey:
        """The public half of the keypair."""
        return Pubkey(bytes(self._signing_key.verify_key))

    def sign(self, message: bytes) -> bytes:
        """Return the 64-byte detached signature of a message."""
        return self._signing_key.sign(bytes(message)).signature

    def __repr__(self) -> str:
        return f"Keypair(pubkey={self.pubkey()})"


def is_valid_solana_address(address: str) -> bool:
    """True if the text is 32 to 44 characters long and parses as a public key."""
    if not 32 <= len(address) <= 44:
        return False
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def make_keypairs(amount: int) -> list[Keypair]:
    """Generate the given number of keypairs."""
    return [Keypair.generate() for _ in range(amount)]