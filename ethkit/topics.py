"""Encoding and parsing of indexed event arguments carried in log topics."""

from __future__ import annotations

from typing import Any, Sequence

from .abitype import Kind, TupleElem, Type, new_tuple_type
from .decoding import decode
from .encoding import encode
from .primitives import Hash, Log

_TOPIC_TRUE = Hash(bytes(31) + b"\x01")
_TOPIC_FALSE = Hash(bytes(32))


def parse_log(args: Type, log: Log) -> dict[str, Any]:
    """Parse the topics and data of ``log`` with the event arguments ``args``."""
    indexed: list[TupleElem] = []
    non_indexed: list[TupleElem] = []
    for item in args.tuple_elems:
        (indexed if item.indexed else non_indexed).append(item)

    indexed_values = iter(parse_topics(new_tuple_type(indexed), log.topics[1:]))

    non_indexed_values: dict[str, Any] = {}
    if non_indexed:
        decoded = decode(new_tuple_type(non_indexed), log.data)
        if not isinstance(decoded, dict):
            raise ValueError("bad decoding")
        non_indexed_values = decoded

    result: dict[str, Any] = {}
    position = 0
    for item in args.tuple_elems:
        if item.indexed:
            result[item.name] = next(indexed_values)
        else:
            result[item.name] = non_indexed_values.get(item.name or str(position))
            position += 1
    return result


def parse_topics(args: Type, topics: Sequence[Hash]) -> list[Any]:
    """Parse each topic with the matching element of the tuple type ``args``."""
    if args.kind is not Kind.TUPLE:
        raise ValueError("expected a tuple type")
    if len(args.tuple_elems) != len(topics):
        raise ValueError("bad length")
    return [parse_topic(item.elem, topic) for item, topic in zip(args.tuple_elems, topics)]


def parse_topic(t: Type, topic: bytes) -> Any:
    """Parse a single topic word as a value of type ``t``."""
    raw = bytes(topic)
    if len(raw) != 32:
        raise ValueError(f"topic must be 32 bytes, got {len(raw)}")
    if t.kind is Kind.BOOL:
        if raw == _TOPIC_TRUE:
            return True
        if raw == _TOPIC_FALSE:
            return False
        raise ValueError("is not a boolean")
    if t.kind in (Kind.INT, Kind.UINT, Kind.ADDRESS, Kind.FIXED_BYTES):
        return decode(t, raw)
    raise ValueError(f"topic parsing for type {t} not supported")


def encode_topic(t: Type, value: Any) -> Hash:
    """Encode ``value`` of type ``t`` as a topic word."""
    if t.kind is Kind.BOOL:
        if not isinstance(value, bool):
            raise ValueError(f"failed to encode {type(value).__name__} as bool")
        return _TOPIC_TRUE if value else _TOPIC_FALSE
    if t.kind in (Kind.INT, Kind.UINT, Kind.ADDRESS):
        return Hash(encode(value, t))
    raise ValueError(f"topic encoding for type {t} not supported")