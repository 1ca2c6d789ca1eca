"""Random ABI types, values and matching contract sources for testing encoders."""

from __future__ import annotations

import random
import string
from typing import Any

from .abitype import Kind, Type
from .primitives import Address

_RANDOM_TYPES = (
    "bool",
    "int",
    "uint",
    "array",
    "slice",
    "tuple",
    "address",
    "string",
    "bytes",
    "fixedBytes",
)
_BASIC_TYPES = frozenset({"bool", "address", "string", "bytes", "function"})
_LETTERS = string.ascii_lowercase + string.ascii_uppercase
_MAX_DEPTH = 3

_CONTRACT_TEMPLATE = (
    "pragma solidity ^0.5.5;\n"
    "pragma experimental ABIEncoderV2;\n"
    "\n"
    "contract Sample {\n"
    "\t// structs\n"
    "\t{structs}\n"
    "\tfunction set({inputs}) public view returns ({outputs}) {{\n"
    "\t\treturn ({body});\n"
    "\t}}\n"
    "}}"
)


def _rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def _number_bits(rng: random.Random) -> int:
    return rng.randrange(1, 31) * 8


def _pick_type(rng: random.Random, depth: int) -> str:
    while True:
        name = rng.choice(_RANDOM_TYPES)
        if name in _BASIC_TYPES:
            return name
        if name == "int":
            return f"int{_number_bits(rng)}"
        if name == "uint":
            return f"uint{_number_bits(rng)}"
        if name == "fixedBytes":
            return f"bytes{rng.randrange(1, 32)}"
        if depth <= _MAX_DEPTH:
            break

    if name == "slice":
        return f"{_pick_type(rng, depth + 1)}[]"
    if name == "array":
        inner = _pick_type(rng, depth + 1)
        return f"{inner}[{rng.randrange(1, 3)}]"
    size = rng.randrange(1, 5)
    elems = ",".join(f"{_pick_type(rng, depth + 1)} arg{i}" for i in range(size))
    return f"tuple({elems})"


def random_type(rng: random.Random | None = None) -> str:
    """Return the string form of a random ABI type, nested at most a few levels."""
    return _pick_type(_rng(rng), 1)


def _random_number(t: Type, rng: random.Random) -> int:
    raw = bytearray(rng.randbytes(t.size // 8))
    if t.kind is Kind.INT and raw:
        raw[0] = 0  # keep signed values positive
    return int.from_bytes(raw, "big")


def generate_random_value(t: Type, rng: random.Random | None = None) -> Any:
    """Return a random value that can be encoded with the ABI type ``t``."""
    rng = _rng(rng)
    kind = t.kind
    if kind in (Kind.INT, Kind.UINT):
        return _random_number(t, rng)
    if kind is Kind.BOOL:
        return rng.choice((True, False))
    if kind is Kind.ADDRESS:
        return Address(rng.randbytes(Address.SIZE))
    if kind is Kind.STRING:
        return "".join(rng.choice(_LETTERS) for _ in range(rng.randrange(1, 100)))
    if kind is Kind.BYTES:
        return rng.randbytes(rng.randrange(1, 100))
    if kind in (Kind.FIXED_BYTES, Kind.FUNCTION):
        return rng.randbytes(t.size)
    if kind is Kind.SLICE:
        return [generate_random_value(t.elem, rng) for _ in range(rng.randrange(0, 5))]
    if kind is Kind.ARRAY:
        return [generate_random_value(t.elem, rng) for _ in range(t.size)]
    if kind is Kind.TUPLE:
        return {
            item.name or str(index): generate_random_value(item.elem, rng)
            for index, item in enumerate(t.tuple_elems)
        }
    raise ValueError(f"type not implemented: {kind}")


class _ContractWriter:
    def __init__(self) -> None:
        self.structs: list[str] = []

    def type_name(self, t: Type) -> str:
        if t.kind is Kind.TUPLE:
            attrs = [
                f"{self.type_name(item.elem)} attr{index};"
                for index, item in enumerate(t.tuple_elems)
            ]
            struct_id = len(self.structs)
            self.structs.append(f"struct struct{struct_id} {{\n" + "\n".join(attrs) + "\n}\n")
            return f"struct{struct_id}"
        if t.kind is Kind.SLICE:
            return f"{self.type_name(t.elem)}[]"
        if t.kind is Kind.ARRAY:
            return f"{self.type_name(t.elem)}[{t.size}]"
        return str(t)

    def render(self, t: Type) -> str:
        inputs, outputs, body = [], [], []
        for index, item in enumerate(t.tuple_elems):
            name = self.type_name(item.elem)
            memory = ""
            if name == "bytes" or any(part in name for part in ("[", "struct", "string")):
                memory = " memory"
            inputs.append(f"{name}{memory} arg{index}")
            outputs.append(f"{name}{memory}")
            body.append(f"arg{index}")
        return _CONTRACT_TEMPLATE.format(
            structs="\n".join(self.structs),
            inputs=",".join(inputs),
            outputs=",".join(outputs),
            body=",".join(body),
        )


def generate_contract(t: Type) -> str:
    """Return a contract source whose ``set`` function echoes arguments of tuple ``t``."""
    if t.kind is not Kind.TUPLE:
        raise ValueError("expected a tuple type")
    return _ContractWriter().render(t)