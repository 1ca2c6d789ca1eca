"""Core value types: addresses, hashes, logs, blocks and hashing helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from Crypto.Hash import keccak

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def _parse_hex(text: str) -> bytes:
    """Decode a hex string with an optional 0x prefix."""
    if text.startswith(("0x", "0X")):
        text = text[2:]
    if not _HEX_RE.fullmatch(text):
        raise ValueError(f"invalid hex string: {text!r}")
    if len(text) % 2:
        text = "0" + text
    return bytes.fromhex(text)


def keccak256(data: bytes) -> bytes:
    """Return the legacy Keccak-256 digest of ``data``."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


class _FixedBytes(bytes):
    """Immutable byte string of a fixed length."""

    SIZE = 0

    def __new__(cls, value: bytes | str = b""):
        raw = _parse_hex(value) if isinstance(value, str) else bytes(value)
        if not raw:
            raw = bytes(cls.SIZE)
        if len(raw) != cls.SIZE:
            raise ValueError(
                f"{cls.__name__} expects {cls.SIZE} bytes, got {len(raw)}"
            )
        return super().__new__(cls, raw)

    def __str__(self) -> str:
        return "0x" + self.hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self}')"


class Address(_FixedBytes):
    """A 20-byte account address."""

    SIZE = 20


class Hash(_FixedBytes):
    """A 32-byte hash."""

    SIZE = 32


def hex_to_address(text: str) -> Address:
    """Parse a hex string into an address, left-padding short values."""
    raw = _parse_hex(text)
    if len(raw) > Address.SIZE:
        raise ValueError(f"address too long: {len(raw)} bytes")
    return Address(raw.rjust(Address.SIZE, b"\x00"))


@dataclass
class Log:
    """A log entry emitted by a contract."""

    address: Address = field(default_factory=Address)
    topics: list[Hash] = field(default_factory=list)
    data: bytes = b""
    block_number: int = 0
    block_hash: Hash = field(default_factory=Hash)
    transaction_hash: Hash = field(default_factory=Hash)
    transaction_index: int = 0
    log_index: int = 0
    removed: bool = False


@dataclass
class Block:
    """A block header with the hashes of its transactions."""

    number: int = 0
    hash: Hash = field(default_factory=Hash)
    parent_hash: Hash = field(default_factory=Hash)
    timestamp: int = 0
    miner: Address = field(default_factory=Address)
    gas_limit: int = 0
    gas_used: int = 0
    difficulty: int = 0
    extra_data: bytes = b""
    transactions: list[Hash] = field(default_factory=list)

    def copy(self) -> Block:
        """Return an independent copy of the block."""
        return replace(self, transactions=list(self.transactions))


def name_hash(name: str) -> Hash:
    """Return the ENS name hash of ``name``."""
    node = bytes(32)
    if not name:
        return Hash(node)
    for label in reversed(name.split(".")):
        node = keccak256(node + keccak256(label.encode()))
    return Hash(node)