import pytest

from ethkit.abitype import ArgumentStr, new_type, new_type_from_argument
from ethkit.decoding import decode
from ethkit.encoding import decode_hex, encode, encode_hex
from ethkit.primitives import Address, hex_to_address

A1 = Address(b"\x01" + bytes(19))
A2 = Address(b"\x02" + bytes(19))


def b32(first):
    return bytes([first]) + bytes(31)


def word(n):
    return n.to_bytes(32, "big")


NESTED = [
    [[1, 2], [3, 4], [5, 6]],
    [[7, 8], [9, 10], [11, 12]],
    [[13, 14], [15, 16], [17, 18]],
    [[19, 20], [21, 22], [23, 24]],
]

ROUND_TRIP_CASES = [
    ("uint40", 50),
    ("int256", 2),
    ("int256[]", [1, 2]),
    ("int256", -10),
    ("bytes5", bytes([1, 2, 3, 4, 5])),
    ("bytes", bytes.fromhex("12345678911121314151617181920211")),
    ("string", "foobar"),
    ("uint8[][2]", [[1], [1]]),
    ("address[]", [A1, A2]),
    ("bytes10[]", [bytes.fromhex("01020304050607080910")] * 2),
    ("bytes[]", [b"\x11", b"\x22"]),
    ("uint32[2][3][4]", NESTED),
    ("uint8[]", [1, 2]),
    ("string[]", ["hello", "foobar"]),
    ("string[2]", ["hello", "foobar"]),
    ("bytes32[][]", [[b32(1), b32(2)], [b32(3), b32(4), b32(5)]]),
    ("bytes32[][2]", [[b32(1), b32(2)], [b32(3), b32(4), b32(5)]]),
    ("bytes32[3][2]", [[b32(1), b32(2), b32(3)], [b32(3), b32(4), b32(5)]]),
    ("uint16[][2][]", [[[0, 1], [2, 3]], [[4, 5], [6, 7]]]),
    ("tuple(bytes[] a)", {"a": [b"\xf0\xf0\xf0", b"\xf0\xf0\xf0"]}),
    ("tuple(uint32[2][][] a)", {"a": [[[1, 200], [1, 1000]], [[1, 200], [1, 1000]]]}),
    ("tuple(uint64[2] a)", {"a": [1, 2]}),
    ("tuple(uint32[2][3][4] a)", {"a": NESTED}),
    ("tuple(int32[] a)", {"a": [1, 2]}),
    ("tuple(int32 a, int32 b)", {"a": 1, "b": 2}),
    ("tuple(string a, int32 b)", {"a": "Hello World" + "x" * 82, "b": 2}),
    ("tuple(int32[2] a, int32[] b)", {"a": [1, 2], "b": [4, 5, 6]}),
    ("tuple(address[] a)", {"a": [A1]}),
    ("tuple(int32[] a, int32[2] b)", {"a": [1, 2, 3], "b": [4, 5]}),
    ("tuple(int32[] a, int32[] b)", {"a": [1, 2, 3], "b": [4, 5, 6]}),
    ("tuple(string a, int64 b)", {"a": "hello World", "b": 266}),
    ("tuple(int32 a, int32 b)[2]", [{"a": 1, "b": 2}, {"a": 3, "b": 4}]),
    ("tuple(int32[] a)[2]", [{"a": [1, 2, 3]}, {"a": [4, 5, 6]}]),
    ("tuple(int32 a, int32[] b)[]", [{"a": 1, "b": [2, 3]}, {"a": 4, "b": [5, 6]}]),
    (
        "tuple(tuple(int32 c, int32[] d) a, int32[] b)",
        {"a": {"c": 5, "d": [3, 4]}, "b": [1, 2]},
    ),
    (
        "tuple(uint8[2] a, tuple(uint8 e, uint32 f)[2] b, uint16 c, uint64[2][1] d)",
        {
            "a": [1, 2],
            "b": [{"e": 10, "f": 11}, {"e": 20, "f": 21}],
            "c": 3,
            "d": [[4, 5]],
        },
    ),
    (
        "tuple(uint16 a, uint16 b)[1][]",
        [
            [{"a": 1, "b": 2}],
            [{"a": 3, "b": 4}],
            [{"a": 5, "b": 6}],
            [{"a": 7, "b": 8}],
        ],
    ),
    (
        "tuple(uint64[][] a, tuple(uint8 a, uint32 b)[1] b, uint64 c)",
        {"a": [[3, 4]], "b": [{"a": 1, "b": 2}], "c": 10},
    ),
]


@pytest.mark.parametrize("type_str,value", ROUND_TRIP_CASES)
def test_round_trip(type_str, value):
    t = new_type(type_str)
    assert decode(t, encode(value, t)) == value


STR_ADDRESS = "0xdbb881a51CD4023E4400CEF3ef73046743f08da3"
ETH_ADDRESS = hex_to_address(STR_ADDRESS)
OVERFLOW = 50000000000000000000000000000000000000

BEST_EFFORT_CASES = [
    ("uint40", 50.0, 50),
    ("uint40", "50", 50),
    ("uint40", "0x32", 50),
    ("int256", 2.0, 2),
    ("int256", "50000000000000000000000000000000000000", OVERFLOW),
    ("int256", "0x259DA6542D43623D04C5112000000000", OVERFLOW),
    ("int256[]", [1.0, 2.0], [1, 2]),
    ("int256[]", ["1", "2"], [1, 2]),
    ("int256", -10.0, -10),
    ("int256", "-10", -10),
    ("address[]", [STR_ADDRESS, STR_ADDRESS], [ETH_ADDRESS, ETH_ADDRESS]),
    ("uint8[]", [1.0, 2.0], [1, 2]),
    ("uint8[]", ["1", "2"], [1, 2]),
    ("bytes", "0x11", b"\x11"),
    ("bytes32", "0x11", b32(0x11)),
    ("tuple(address a)", {"a": STR_ADDRESS}, {"a": ETH_ADDRESS}),
    (
        "tuple(address[] a)",
        {"a": [STR_ADDRESS, STR_ADDRESS]},
        {"a": [ETH_ADDRESS, ETH_ADDRESS]},
    ),
    (
        "tuple(address a, int64 b)",
        {"a": STR_ADDRESS, "b": 266.0},
        {"a": ETH_ADDRESS, "b": 266},
    ),
    (
        "tuple(address a, int256 b)",
        {"a": STR_ADDRESS, "b": "50000000000000000000000000000000000000"},
        {"a": ETH_ADDRESS, "b": OVERFLOW},
    ),
    (
        "tuple(address a, int256 b)",
        {"a": STR_ADDRESS, "b": "0x259DA6542D43623D04C5112000000000"},
        {"a": ETH_ADDRESS, "b": OVERFLOW},
    ),
]


@pytest.mark.parametrize("type_str,value,expected", BEST_EFFORT_CASES)
def test_best_effort(type_str, value, expected):
    t = new_type(type_str)
    assert decode(t, encode(value, t)) == expected


@pytest.mark.parametrize(
    "arg,value",
    [
        (
            ArgumentStr(
                type="tuple",
                components=[ArgumentStr(name="", type="int32"), ArgumentStr(name="", type="int32")],
            ),
            {"0": 1, "1": 2},
        ),
        (
            ArgumentStr(
                type="tuple",
                components=[ArgumentStr(name="a", type="int32"), ArgumentStr(name="", type="int32")],
            ),
            {"a": 1, "1": 2},
        ),
    ],
)
def test_arguments_round_trip(arg, value):
    t = new_type_from_argument(arg)
    assert decode(t, encode(value, t)) == value


def test_pinned_uint():
    assert encode(1, new_type("uint256")) == bytes(31) + b"\x01"


def test_pinned_negative_int():
    assert encode(-1, new_type("int256")) == b"\xff" * 32


def test_pinned_bool():
    assert encode(True, new_type("bool")) == word(1)
    assert encode(False, new_type("bool")) == word(0)


def test_pinned_string():
    assert encode("foobar", new_type("string")) == word(6) + b"foobar" + bytes(26)


def test_pinned_tuple_with_offset():
    t = new_type("tuple(uint256 a, string b)")
    expected = word(1) + word(64) + word(1) + b"a" + bytes(31)
    assert encode({"a": 1, "b": "a"}, t) == expected


def test_positional_tuple_matches_mapping():
    t = new_type("tuple(uint256 a, string b)")
    assert encode([7, "xy"], t) == encode({"a": 7, "b": "xy"}, t)


def test_address_left_padded():
    assert encode(A1, new_type("address")) == bytes(12) + bytes(A1)


def test_fixed_bytes_right_padded():
    assert encode(b"\xab", new_type("bytes4")) == b"\xab" + bytes(31)


@pytest.mark.parametrize(
    "type_str,value",
    [
        ("bool", 1),
        ("uint256", True),
        ("uint256", "abc"),
        ("uint256", None),
        ("string", 5),
        ("uint8[2]", [1, 2, 3]),
        ("uint8[]", "12"),
        ("tuple(uint8 a, uint8 b)", {"a": 1}),
        ("tuple(uint8 a, uint8 b)", {"a": 1, "c": 2}),
        ("tuple(uint8 a)", 5),
        ("bytes", "0xzz"),
        ("address", 12),
    ],
)
def test_encode_errors(type_str, value):
    with pytest.raises(ValueError):
        encode(value, new_type(type_str))


def test_encode_hex():
    assert encode_hex(b"\x01\xab") == "0x01ab"


def test_decode_hex():
    assert decode_hex("0x01ab") == b"\x01\xab"
    assert decode_hex("01ab") == b"\x01\xab"


@pytest.mark.parametrize("text", ["0x1", "0xgg", "zz"])
def test_decode_hex_errors(text):
    with pytest.raises(ValueError):
        decode_hex(text)