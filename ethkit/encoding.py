"""Encoding of Python values into the ABI binary format."""

from __future__ import annotations

import dataclasses
import math
import re
from collections.abc import Mapping
from typing import Any

from .abitype import Kind, Type, get_type_size
from .primitives import Address

_WORD = 32
_MODULUS = 1 << 256
_HEX_BODY = re.compile(r"[0-9a-fA-F]*")
_DECIMAL_NUMBER = re.compile(r"[+-]?[0-9]+")
_HEX_NUMBER = re.compile(r"[+-]?[0-9a-fA-F]+")


def encode_hex(data: bytes) -> str:
    """Return ``data`` as a 0x-prefixed hex string."""
    return "0x" + bytes(data).hex()


def decode_hex(text: str) -> bytes:
    """Decode a hex string with an optional 0x prefix."""
    body = text[2:] if text.startswith("0x") else text
    if not _HEX_BODY.fullmatch(body):
        raise ValueError(f"could not decode hex: invalid byte in {text!r}")
    if len(body) % 2:
        raise ValueError("could not decode hex: odd length hex string")
    return bytes.fromhex(body)


def encode(value: Any, t: Type) -> bytes:
    """Encode ``value`` according to the ABI type ``t``."""
    kind = t.kind
    if kind in (Kind.SLICE, Kind.ARRAY):
        return _encode_sequence(value, t)
    if kind is Kind.TUPLE:
        return _encode_tuple(value, t)
    if kind is Kind.STRING:
        return _encode_string(value)
    if kind is Kind.BOOL:
        return _encode_bool(value)
    if kind is Kind.ADDRESS:
        return _encode_address(value)
    if kind in (Kind.INT, Kind.UINT):
        return _encode_number(value)
    if kind is Kind.BYTES:
        return _pack_bytes(_as_bytes(value, "bytes"))
    if kind in (Kind.FIXED_BYTES, Kind.FUNCTION):
        return _pad(_as_bytes(value, str(kind)), _WORD, left=False)
    raise ValueError(f"encoding not available for type '{kind}'")


def _encode_error(value: Any, target: str) -> ValueError:
    return ValueError(f"failed to encode {type(value).__name__} as {target}")


def _pad(data: bytes, size: int, *, left: bool) -> bytes:
    if len(data) == size:
        return data
    if len(data) > size:
        return data[len(data) - size:]
    return data.rjust(size, b"\x00") if left else data.ljust(size, b"\x00")


def _parse_number(text: str) -> int:
    if _DECIMAL_NUMBER.fullmatch(text):
        return int(text, 10)
    body = text[2:]
    if _HEX_NUMBER.fullmatch(body):
        return int(body, 16)
    raise _encode_error(text, "number")


def _encode_number(value: Any) -> bytes:
    if isinstance(value, bool):
        raise _encode_error(value, "number")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise _encode_error(value, "number")
        number = int(value)
    elif isinstance(value, str):
        number = _parse_number(value)
    else:
        raise _encode_error(value, "number")
    return (number % _MODULUS).to_bytes(_WORD, "big")


def _encode_bool(value: Any) -> bytes:
    if not isinstance(value, bool):
        raise _encode_error(value, "bool")
    return _encode_number(int(value))


def _as_bytes(value: Any, target: str) -> bytes:
    if isinstance(value, str):
        return decode_hex(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, (list, tuple)):
        try:
            return bytes(value)
        except (TypeError, ValueError) as err:
            raise _encode_error(value, target) from err
    raise _encode_error(value, target)


def _encode_address(value: Any) -> bytes:
    if isinstance(value, str):
        raw = bytes(Address(value))
    else:
        raw = _as_bytes(value, "address")
    return _pad(raw, _WORD, left=True)


def _pack_bytes(raw: bytes) -> bytes:
    padded_size = (len(raw) + _WORD - 1) // _WORD * _WORD
    return _encode_number(len(raw)) + _pad(raw, padded_size, left=False)


def _encode_string(value: Any) -> bytes:
    if not isinstance(value, str):
        raise _encode_error(value, "string")
    return _pack_bytes(value.encode("utf-8", "surrogateescape"))


def _encode_sequence(value: Any, t: Type) -> bytes:
    if not isinstance(value, (list, tuple, bytes, bytearray)):
        raise _encode_error(value, str(t.kind))
    items = list(value)
    if t.kind is Kind.ARRAY and len(items) != t.size:
        raise ValueError("array len incompatible")

    head: list[bytes] = []
    tail: list[bytes] = []
    if t.is_variable_input():
        head.append(_encode_number(len(items)))

    dynamic = t.elem.is_dynamic()
    offset = get_type_size(t.elem) * len(items) if dynamic else 0
    for item in items:
        encoded = encode(item, t.elem)
        if dynamic:
            head.append(_encode_number(offset))
            offset += len(encoded)
            tail.append(encoded)
        else:
            head.append(encoded)
    return b"".join(head + tail)


def _fields_of(obj: Any) -> dict[str, Any]:
    """Map a dataclass instance to ABI names (``abi`` metadata or lower-case name)."""
    result: dict[str, Any] = {}
    for f in dataclasses.fields(obj):
        tag = f.metadata.get("abi", "")
        if tag == "-":
            continue
        name = tag or f.name.lower()
        result.setdefault(name, getattr(obj, f.name))
    return result


def _encode_tuple(value: Any, t: Type) -> bytes:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = _fields_of(value)
    if isinstance(value, Mapping):
        positional = False
    elif isinstance(value, (list, tuple)):
        positional = True
    else:
        raise _encode_error(value, "tuple")

    if len(value) < len(t.tuple_elems):
        raise ValueError("expected at least the same length")

    offset = sum(get_type_size(item.elem) for item in t.tuple_elems)
    head: list[bytes] = []
    tail: list[bytes] = []
    for index, item in enumerate(t.tuple_elems):
        if positional:
            element = value[index]
        else:
            key = item.name or str(index)
            if key not in value:
                raise ValueError(f"cannot get key {key}")
            element = value[key]

        encoded = encode(element, item.elem)
        if item.elem.is_dynamic():
            head.append(_encode_number(offset))
            tail.append(encoded)
            offset += len(encoded)
        else:
            head.append(encoded)
    return b"".join(head + tail)