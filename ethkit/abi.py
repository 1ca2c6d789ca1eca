"""Contract ABI: methods, events, errors and their parsing from JSON or text."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from .abitype import ArgumentStr, TupleElem, Type, new_tuple_type, new_type, new_type_from_argument
from .decoding import decode
from .encoding import encode
from .primitives import Hash, Log, keccak256
from .topics import parse_log


def _build_signature(name: str, typ: Type) -> str:
    types = [str(item.elem).replace("tuple", "") for item in typ.tuple_elems]
    return f"{name}({','.join(types)})"


@dataclass
class Method:
    """A callable function of a contract."""

    name: str
    inputs: Type
    outputs: Type | None = None
    const: bool = False

    def sig(self) -> str:
        """Return the canonical signature of the method."""
        return _build_signature(self.name, self.inputs)

    def id(self) -> bytes:
        """Return the 4-byte selector of the method."""
        return keccak256(self.sig().encode())[:4]

    def encode(self, args: Any) -> bytes:
        """Encode a call to the method with ``args`` as inputs."""
        return self.id() + encode(args, self.inputs)

    def decode(self, data: bytes) -> dict[str, Any]:
        """Decode the output returned by a call to the method."""
        if not data:
            raise ValueError("empty response")
        if self.outputs is None:
            raise ValueError("method has no outputs")
        return decode(self.outputs, data)


@dataclass
class Event:
    """A log event emitted by a contract."""

    name: str
    inputs: Type
    anonymous: bool = False

    def sig(self) -> str:
        """Return the canonical signature of the event."""
        return _build_signature(self.name, self.inputs)

    def id(self) -> Hash:
        """Return the topic that identifies the event in logs."""
        return Hash(keccak256(self.sig().encode()))

    def match(self, log: Log) -> bool:
        """Whether ``log`` was emitted by this event."""
        return bool(log.topics) and bytes(log.topics[0]) == self.id()

    def parse_log(self, log: Log) -> dict[str, Any]:
        """Parse the arguments of ``log`` emitted by this event."""
        if not self.match(log):
            raise ValueError("log does not match this event")
        return parse_log(self.inputs, log)


@dataclass
class Error:
    """A custom error declared by a contract."""

    name: str
    inputs: Type


def _overloaded_name(raw: str, taken: Callable[[str], bool]) -> str:
    name = raw
    index = 0
    while taken(name):
        name = f"{raw}{index}"
        index += 1
    return name


@dataclass
class ABI:
    """The interface of a contract."""

    constructor: Method | None = None
    methods: dict[str, Method] = field(default_factory=dict)
    methods_by_signature: dict[str, Method] = field(default_factory=dict)
    events: dict[str, Event] = field(default_factory=dict)
    errors: dict[str, Error] = field(default_factory=dict)

    def get_method(self, name: str) -> Method | None:
        """Return the method registered under ``name``."""
        return self.methods.get(name)

    def get_method_by_signature(self, signature: str) -> Method | None:
        """Return the method with the canonical ``signature``."""
        return self.methods_by_signature.get(signature)

    def _add_method(self, method: Method) -> None:
        name = _overloaded_name(method.name, self.methods.__contains__)
        self.methods[name] = method
        self.methods_by_signature[method.sig()] = method

    def _add_event(self, event: Event) -> None:
        name = _overloaded_name(event.name, self.events.__contains__)
        self.events[name] = event

    def _add_error(self, error: Error) -> None:
        self.errors[error.name] = error


def _tuple_from_args(args: Iterable[ArgumentStr]) -> Type:
    return new_tuple_type(
        TupleElem(name=arg.name, elem=new_type_from_argument(arg), indexed=arg.indexed)
        for arg in args
    )


def _arguments(raw: Any) -> list[ArgumentStr]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("expected a list of arguments")
    return [ArgumentStr.from_dict(item) for item in raw]


def new_abi(text: str | bytes) -> ABI:
    """Parse a JSON ABI description."""
    entries = json.loads(text)
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise ValueError("abi must be a JSON array")

    result = ABI()
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("abi entries must be JSON objects")
        fields = {str(k).lower(): v for k, v in entry.items()}
        kind = fields.get("type") or ""
        name = fields.get("name") or ""

        if kind == "constructor":
            if result.constructor is not None:
                raise ValueError("multiple constructor declaration")
            result.constructor = Method(
                name="", inputs=_tuple_from_args(_arguments(fields.get("inputs")))
            )
        elif kind in ("function", ""):
            const = bool(fields.get("constant", False))
            if fields.get("statemutability") in ("view", "pure"):
                const = True
            result._add_method(
                Method(
                    name=name,
                    inputs=_tuple_from_args(_arguments(fields.get("inputs"))),
                    outputs=_tuple_from_args(_arguments(fields.get("outputs"))),
                    const=const,
                )
            )
        elif kind == "event":
            result._add_event(
                Event(
                    name=name,
                    inputs=_tuple_from_args(_arguments(fields.get("inputs"))),
                    anonymous=bool(fields.get("anonymous", False)),
                )
            )
        elif kind == "error":
            result._add_error(
                Error(name=name, inputs=_tuple_from_args(_arguments(fields.get("inputs"))))
            )
        elif kind in ("fallback", "receive"):
            continue
        else:
            raise ValueError(f"unknown field type '{kind}'")
    return result


_FUNC_WITH_RETURN = re.compile(r"(\w*)\s*\((.*)\)(.*)\s*returns\s*\((.*)\)", re.ASCII)
_FUNC_WITHOUT_RETURN = re.compile(r"(\w*)\s*\((.*)\)(.*)", re.ASCII)


def parse_method_signature(signature: str) -> tuple[str, Type, Type]:
    """Split a human readable function signature into name, inputs and outputs."""
    text = signature.replace("\n", " ").replace("\t", " ")
    if text.startswith("function "):
        text = text[len("function "):]
    text = text.strip()

    outputs = ""
    if "returns" in text:
        match = _FUNC_WITH_RETURN.search(text)
        if match is None:
            raise ValueError("no matches found")
        outputs = match.group(4).strip()
    else:
        match = _FUNC_WITHOUT_RETURN.search(text)
        if match is None:
            raise ValueError("no matches found")
    name = match.group(1).strip()
    inputs = match.group(2).strip()
    return name, new_type(f"tuple({inputs})"), new_type(f"tuple({outputs})")


def new_method(signature: str) -> Method:
    """Build a method from a human readable signature."""
    name, inputs, outputs = parse_method_signature(signature)
    return Method(name=name, inputs=inputs, outputs=outputs)


def _parse_event_or_error(prefix: str, signature: str) -> tuple[str, Type]:
    if not signature.startswith(prefix):
        raise ValueError(f"prefix '{prefix}' not found")
    text = signature[len(prefix):]
    if not text.endswith(")"):
        raise ValueError("failed to parse input, expected 'name(types)'")
    index = text.find("(")
    if index == -1:
        raise ValueError("failed to parse input, expected 'name(types)'")
    return text[:index], new_type("tuple" + text[index:])


def new_event(signature: str) -> Event:
    """Build an event from a signature such as ``event Name(types)``."""
    name, typ = _parse_event_or_error("event ", signature)
    return Event(name=name, inputs=typ)


def new_error(signature: str) -> Error:
    """Build an error from a signature such as ``error Name(types)``."""
    name, typ = _parse_event_or_error("error ", signature)
    return Error(name=name, inputs=typ)


def new_abi_from_list(items: Iterable[str]) -> ABI:
    """Build an ABI from human readable declarations."""
    result = ABI()
    for item in items:
        if item.startswith("constructor"):
            typ = new_type("tuple" + item[len("constructor"):])
            result.constructor = Method(name="", inputs=typ)
        elif item.startswith("function "):
            result._add_method(new_method(item))
        elif item.startswith("event "):
            result._add_event(new_event(item))
        elif item.startswith("error "):
            result._add_error(new_error(item))
        else:
            raise ValueError("either event or function expected")
    return result