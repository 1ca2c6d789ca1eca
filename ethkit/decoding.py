"""Decoding of the ABI binary format into Python values."""

from __future__ import annotations

import dataclasses
from typing import Any

from .abitype import Kind, Type, new_type
from .primitives import Address

_WORD = 32
_MAX_INT256 = (1 << 255) - 1
_MODULUS = 1 << 256
_NATIVE_INT_SIZES = (8, 16, 32, 64)
_REVERT_ID = bytes([0x08, 0xC3, 0x79, 0xA0])


def decode(t: Type, data: bytes) -> Any:
    """Decode ``data`` according to the ABI type ``t``."""
    data = bytes(data)
    if not data:
        raise ValueError("empty input")
    value, _ = _decode(t, data)
    return value


def decode_struct(t: Type, data: bytes, cls: type) -> Any:
    """Decode ``data`` and build an instance of the dataclass ``cls`` from it.

    A field is filled from the key named by its ``abi`` metadata, or else from
    its name, matched case-insensitively; a tag of ``-`` skips the field.
    """
    if not (dataclasses.is_dataclass(cls) and isinstance(cls, type)):
        raise TypeError(f"{cls!r} is not a dataclass")
    values = decode(t, data)
    if not isinstance(values, dict):
        raise ValueError("expected a tuple to decode into a struct")
    lowered = {str(key).lower(): key for key in values}

    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        tag = f.metadata.get("abi", "")
        if tag == "-":
            continue
        key = tag or f.name
        if key in values:
            kwargs[f.name] = values[key]
        elif key.lower() in lowered:
            kwargs[f.name] = values[lowered[key.lower()]]
    return cls(**kwargs)


def unpack_revert_error(data: bytes) -> str:
    """Return the reason string of an ``Error(string)`` revert payload."""
    data = bytes(data)
    if not data.startswith(_REVERT_ID):
        raise ValueError("revert error prefix not found")
    values = decode(new_type("tuple(string)"), data[len(_REVERT_ID):])
    return values["0"]


def _decode(t: Type, data: bytes) -> tuple[Any, bytes]:
    if len(data) < _WORD:
        raise ValueError("incorrect length")

    length = _read_length(data) if t.is_variable_input() else 0
    word = data[:_WORD]
    kind = t.kind

    if kind is Kind.TUPLE:
        return _decode_tuple(t, data)
    if kind is Kind.SLICE:
        return _decode_sequence(t, data[_WORD:], length)
    if kind is Kind.ARRAY:
        return _decode_sequence(t, data, t.size)

    if kind is Kind.BOOL:
        value: Any = _decode_bool(word)
    elif kind in (Kind.INT, Kind.UINT):
        value = _read_integer(t, word)
    elif kind is Kind.STRING:
        value = data[_WORD:_WORD + length].decode("utf-8", "surrogateescape")
    elif kind is Kind.BYTES:
        value = data[_WORD:_WORD + length]
    elif kind is Kind.ADDRESS:
        value = _read_address(word)
    elif kind is Kind.FIXED_BYTES:
        value = _read_fixed_bytes(t, word)
    elif kind is Kind.FUNCTION:
        value = _read_function(word)
    else:
        raise ValueError(f"decoding not available for type '{kind}'")
    return value, data[_WORD:]


def _read_integer(t: Type, word: bytes) -> int:
    """Read an integer word; 8/16/32/64-bit types use only their low bytes."""
    signed = t.kind is Kind.INT
    if t.size in _NATIVE_INT_SIZES:
        return int.from_bytes(word[-(t.size // 8):], "big", signed=signed)
    value = int.from_bytes(word, "big")
    if signed and value > _MAX_INT256:
        value -= _MODULUS
    return value


def _read_address(word: bytes) -> Address:
    if len(word) != _WORD:
        raise ValueError("len is not correct")
    return Address(word[12:])


def _read_fixed_bytes(t: Type, word: bytes) -> bytes:
    return bytes(word[:t.size])


def _read_function(word: bytes) -> bytes:
    if any(word[24:32]):
        raise ValueError(
            "function type expects the last 8 bytes to be empty but found: "
            + word[24:32].hex()
        )
    return bytes(word[:24])


def _decode_bool(word: bytes) -> bool:
    flag = word[31]
    if flag == 0:
        return False
    if flag == 1:
        return True
    raise ValueError("bad boolean")


def _read_offset(data: bytes, limit: int) -> int:
    offset = int.from_bytes(data[:_WORD], "big")
    if offset.bit_length() > 63:
        raise ValueError(f"offset larger than int64: {offset}")
    if offset > limit:
        raise ValueError(f"offset insufficient {limit} require {offset}")
    return offset


def _read_length(data: bytes) -> int:
    length = int.from_bytes(data[:_WORD], "big")
    if length.bit_length() > 63:
        raise ValueError(f"length larger than int64: {length}")
    if length > len(data) - _WORD:
        raise ValueError(f"length insufficient {len(data)} require {length}")
    return length


def _decode_element(elem: Type, data: bytes, orig: bytes) -> tuple[Any, bytes]:
    """Decode one head entry and return the value with the remaining head."""
    if len(data) < _WORD:
        raise ValueError("incorrect length")
    if elem.is_dynamic():
        offset = _read_offset(data, len(orig))
        value, _ = _decode(elem, orig[offset:])
        return value, data[_WORD:]
    return _decode(elem, data)


def _decode_tuple(t: Type, data: bytes) -> tuple[dict[str, Any], bytes]:
    result: dict[str, Any] = {}
    orig = data
    for index, item in enumerate(t.tuple_elems):
        value, data = _decode_element(item.elem, data, orig)
        name = item.name or str(index)
        if name in result:
            raise ValueError("tuple with repeated values")
        result[name] = value
    return result, data


def _decode_sequence(t: Type, data: bytes, size: int) -> tuple[list[Any], bytes]:
    if size < 0:
        raise ValueError("size is lower than zero")
    if _WORD * size > len(data):
        raise ValueError("size is too big")
    orig = data
    items: list[Any] = []
    for _ in range(size):
        value, data = _decode_element(t.elem, data, orig)
        items.append(value)
    return items, data