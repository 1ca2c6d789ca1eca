"""Ethereum ABI types, encoding and decoding, log parsing, ENS hashing and block tracking."""

__version__ = "0.1.0"

__all__ = [
    "abi",
    "abitype",
    "blocktracker",
    "decoding",
    "encoding",
    "fourbyte",
    "primitives",
    "randomgen",
    "topics",
]