"""ABI type model and the parser for type strings."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Kind(Enum):
    """The kind of an ABI type."""

    BOOL = 0
    UINT = 1
    INT = 2
    STRING = 3
    ARRAY = 4
    SLICE = 5
    ADDRESS = 6
    BYTES = 7
    FIXED_BYTES = 8
    FIXED_POINT = 9
    TUPLE = 10
    FUNCTION = 11

    def __str__(self) -> str:
        return self.name.title().replace("_", "")


@dataclass
class TupleElem:
    """A named element of a tuple type."""

    name: str
    elem: Type
    indexed: bool = False


@dataclass
class ArgumentStr:
    """An argument as it appears in a JSON ABI description."""

    name: str = ""
    type: str = ""
    indexed: bool = False
    components: list[ArgumentStr] = field(default_factory=list)
    internal_type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ArgumentStr:
        """Build an argument from a JSON object; keys match case-insensitively."""
        fields = {str(k).lower(): v for k, v in data.items()}
        return cls(
            name=fields.get("name") or "",
            type=fields.get("type") or "",
            indexed=bool(fields.get("indexed", False)),
            components=[cls.from_dict(c) for c in fields.get("components") or []],
            internal_type=fields.get("internaltype") or "",
        )


@dataclass
class Type:
    """An ABI type."""

    kind: Kind
    size: int = 0
    elem: Type | None = None
    tuple_elems: list[TupleElem] = field(default_factory=list)
    internal_type: str = ""

    def __str__(self) -> str:
        return self.format(False)

    def format(self, include_args: bool = False) -> str:
        """Render the type; with ``include_args`` tuple names are included."""
        kind = self.kind
        if kind is Kind.TUPLE:
            parts = []
            for item in self.tuple_elems:
                text = item.elem.format(include_args)
                if item.indexed:
                    text += " indexed"
                if include_args and item.name:
                    text += " " + item.name
                parts.append(text)
            return f"tuple({','.join(parts)})"
        if kind is Kind.ARRAY:
            return f"{self.elem.format(include_args)}[{self.size}]"
        if kind is Kind.SLICE:
            return f"{self.elem.format(include_args)}[]"
        if kind is Kind.FIXED_BYTES:
            return f"bytes{self.size}"
        if kind is Kind.UINT:
            return f"uint{self.size}"
        if kind is Kind.INT:
            return f"int{self.size}"
        simple = {
            Kind.BYTES: "bytes",
            Kind.STRING: "string",
            Kind.BOOL: "bool",
            Kind.ADDRESS: "address",
            Kind.FUNCTION: "function",
        }
        if kind in simple:
            return simple[kind]
        raise ValueError(f"abi type {kind} cannot be formatted")

    def is_variable_input(self) -> bool:
        """Whether the encoding starts with a length word."""
        return self.kind in (Kind.SLICE, Kind.BYTES, Kind.STRING)

    def is_dynamic(self) -> bool:
        """Whether the type is encoded by reference with an offset."""
        if self.kind is Kind.TUPLE:
            return any(item.elem.is_dynamic() for item in self.tuple_elems)
        if self.kind in (Kind.STRING, Kind.BYTES, Kind.SLICE):
            return True
        return self.kind is Kind.ARRAY and self.elem.is_dynamic()


def new_tuple_type(elems) -> Type:
    """Build a tuple type from its elements."""
    return Type(Kind.TUPLE, tuple_elems=list(elems))


def get_type_size(t: Type) -> int:
    """Return the size in bytes of the head part of the type's encoding."""
    if t.kind is Kind.ARRAY and not t.elem.is_dynamic():
        if t.elem.kind in (Kind.ARRAY, Kind.TUPLE):
            return t.size * get_type_size(t.elem)
        return t.size * 32
    if t.kind is Kind.TUPLE and not t.is_dynamic():
        return sum(get_type_size(item.elem) for item in t.tuple_elems)
    return 32


# --- argument conversion -------------------------------------------------


def _argument_type_string(arg: ArgumentStr) -> str:
    if not arg.type.startswith("tuple"):
        return arg.type
    if not arg.components:
        return "tuple()"
    parts = []
    for comp in arg.components:
        inner = _argument_type_string(comp)
        if comp.indexed:
            parts.append(f"{inner} indexed {comp.name}")
        else:
            parts.append(f"{inner} {comp.name}")
    return f"tuple({','.join(parts)}){arg.type[len('tuple'):]}"


def _fill_internal_types(typ: Type, arg: ArgumentStr) -> None:
    typ.internal_type = arg.internal_type
    if not arg.components:
        return
    # tuples may be wrapped in arrays or slices, e.g. tuple()[] or tuple()[2]
    while typ.kind is not Kind.TUPLE:
        if typ.kind not in (Kind.ARRAY, Kind.SLICE):
            return
        typ = typ.elem
    if len(arg.components) != len(typ.tuple_elems):
        return
    for item, comp in zip(typ.tuple_elems, arg.components):
        _fill_internal_types(item.elem, comp)


def new_type_from_argument(arg: ArgumentStr) -> Type:
    """Parse an ABI type from a JSON argument description."""
    typ = new_type(_argument_type_string(arg))
    _fill_internal_types(typ, arg)
    return typ


# --- lexer ---------------------------------------------------------------


class _Sym(Enum):
    EOF = 0
    STR = 1
    NUMBER = 2
    TUPLE = 3
    LPAREN = 4
    RPAREN = 5
    LBRACKET = 6
    RBRACKET = 7
    COMMA = 8
    INDEXED = 9
    INVALID = 10


_SYM_LABELS = {
    _Sym.EOF: "eof",
    _Sym.STR: "string",
    _Sym.NUMBER: "number",
    _Sym.TUPLE: "tuple",
    _Sym.LPAREN: "(",
    _Sym.RPAREN: ")",
    _Sym.LBRACKET: "[",
    _Sym.RBRACKET: "]",
    _Sym.COMMA: ",",
    _Sym.INDEXED: "indexed",
    _Sym.INVALID: "<invalid>",
}


@dataclass
class _Lexeme:
    kind: _Sym
    literal: str = str()


_PUNCTUATION = {
    ",": _Sym.COMMA,
    "(": _Sym.LPAREN,
    ")": _Sym.RPAREN,
    "[": _Sym.LBRACKET,
    "]": _Sym.RBRACKET,
}
_KEYWORDS = {"tuple": _Sym.TUPLE, "indexed": _Sym.INDEXED}


def _is_letter(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class _Lexer:
    def __init__(self, text: str):
        self._text = text
        self._pos = 0
        self.current = _Lexeme(_Sym.EOF)
        self.peek = _Lexeme(_Sym.EOF)

    def _char(self) -> str:
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def advance(self) -> _Lexeme:
        self.current = self.peek
        self.peek = self._scan()
        return self.current

    def _read_while(self, predicate) -> str:
        start = self._pos
        while self._char() and predicate(self._char()):
            self._pos += 1
        return self._text[start:self._pos]

    def _scan(self) -> _Lexeme:
        self._read_while(lambda c: c in " \t\n\r")
        ch = self._char()
        if ch in ("", "\x00"):
            return _Lexeme(_Sym.EOF)
        if ch in _PUNCTUATION:
            self._pos += 1
            return _Lexeme(_PUNCTUATION[ch])
        if _is_letter(ch):
            literal = self._read_while(lambda c: _is_letter(c) or _is_digit(c))
            return _Lexeme(_KEYWORDS.get(literal, _Sym.STR), literal)
        if _is_digit(ch):
            return _Lexeme(_Sym.NUMBER, self._read_while(_is_digit))
        self._pos += 1
        return _Lexeme(_Sym.INVALID)


def _expected(kind: _Sym) -> ValueError:
    return ValueError(f"expected token {_SYM_LABELS[kind]}")


def _not_expected(kind: _Sym) -> ValueError:
    return ValueError(f"token '{_SYM_LABELS[kind]}' not expected")


# --- parser --------------------------------------------------------------

_SIMPLE_TYPE_RE = re.compile(r"([A-Za-z]+)([0-9]*)")
_MAX_ARRAY_SIZE = 2**32 - 1


def _integer_size(size: int) -> int:
    if size % 8 != 0:
        raise ValueError("number of bytes has to be M mod 8")
    return size


def _decode_simple_type(text: str) -> Type:
    match = _SIMPLE_TYPE_RE.fullmatch(text)
    if match is None:
        raise ValueError(
            f"type format is incorrect. Expected 'type''bytes' but found '{text}'"
        )
    name, digits = match.groups()
    size = int(digits) if digits else 0

    if name in ("int", "uint"):
        if not digits:
            size = 256
    elif name != "bytes" and digits:
        raise ValueError(f"type {name} does not expect bytes")

    if name == "uint":
        return Type(Kind.UINT, size=_integer_size(size))
    if name == "int":
        return Type(Kind.INT, size=_integer_size(size))
    if name in ("byte", "bytes"):
        if name == "byte":
            size = 1
        if size == 0:
            return Type(Kind.BYTES)
        return Type(Kind.FIXED_BYTES, size=size)
    if name == "string":
        return Type(Kind.STRING)
    if name == "bool":
        return Type(Kind.BOOL)
    if name == "address":
        return Type(Kind.ADDRESS, size=20)
    if name == "function":
        return Type(Kind.FUNCTION, size=24)
    raise ValueError(f"unknown type '{name}'")


def _read_tuple(lexer: _Lexer) -> Type:
    elems: list[TupleElem] = []
    while True:
        try:
            elem = _read_type(lexer)
        except ValueError as err:
            if lexer.current.kind is _Sym.RPAREN and not elems:
                break  # empty tuple 'tuple()'
            raise ValueError(f"failed to decode type: {err}") from err

        name = ""
        indexed = False
        if lexer.peek.kind is _Sym.STR:
            name = lexer.advance().literal
        elif lexer.peek.kind is _Sym.INDEXED:
            lexer.advance()
            indexed = True
            if lexer.peek.kind is _Sym.STR:
                name = lexer.advance().literal
        elems.append(TupleElem(name=name, elem=elem, indexed=indexed))

        following = lexer.advance()
        if following.kind is _Sym.COMMA:
            continue
        if following.kind is _Sym.RPAREN:
            break
        raise _not_expected(following.kind)
    return Type(Kind.TUPLE, tuple_elems=elems)


def _read_type(lexer: _Lexer) -> Type:
    lexeme = lexer.advance()

    if lexeme.kind is _Sym.TUPLE:
        if lexer.advance().kind is not _Sym.LPAREN:
            raise _expected(_Sym.LPAREN)
        result = _read_tuple(lexer)
    elif lexeme.kind is _Sym.LPAREN:
        result = _read_tuple(lexer)
    elif lexeme.kind is not _Sym.STR:
        raise _expected(_Sym.STR)
    else:
        result = _decode_simple_type(lexeme.literal)

    while lexer.peek.kind is _Sym.LBRACKET:
        lexer.advance()
        size_lexeme = lexer.advance()
        if size_lexeme.kind is _Sym.RBRACKET:
            result = Type(Kind.SLICE, elem=result)
        elif size_lexeme.kind is _Sym.NUMBER:
            size = int(size_lexeme.literal)
            if size > _MAX_ARRAY_SIZE:
                raise ValueError(
                    f"failed to read array size '{size_lexeme.literal}': value out of range"
                )
            result = Type(Kind.ARRAY, size=size, elem=result)
            if lexer.advance().kind is not _Sym.RBRACKET:
                raise _expected(_Sym.RBRACKET)
        else:
            raise _not_expected(size_lexeme.kind)
    return result


def new_type(text: str) -> Type:
    """Parse an ABI type from its string form."""
    lexer = _Lexer(text)
    lexer.advance()
    return _read_type(lexer)