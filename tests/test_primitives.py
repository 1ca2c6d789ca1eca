import pytest

from ethkit.primitives import (
    Address,
    Block,
    Hash,
    Log,
    hex_to_address,
    keccak256,
    name_hash,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("eth", "0x93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae"),
        ("foo.eth", "0xde9b09fd7c5f901e23a3f19fecc54828e9c848539801e86591bd9801b019f84f"),
    ],
)
def test_name_hash(name, expected):
    assert str(name_hash(name)) == expected


def test_name_hash_empty_is_zero():
    assert name_hash("") == Hash(bytes(32))


def test_keccak256_empty():
    assert keccak256(b"").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_address_from_hex_and_str():
    addr = Address("0x" + "ab" * 20)
    assert addr == bytes([0xAB] * 20)
    assert str(addr) == "0x" + "ab" * 20


def test_address_wrong_length():
    with pytest.raises(ValueError):
        Address(b"\x01\x02")


def test_hash_default_is_zero():
    assert Hash() == bytes(32)


def test_hash_invalid_hex():
    with pytest.raises(ValueError):
        Hash("0xzz")


def test_hex_to_address_pads_left():
    addr = hex_to_address("0x01")
    assert addr == bytes(19) + b"\x01"


def test_hex_to_address_mixed_case():
    addr = hex_to_address("0xdbb881a51CD4023E4400CEF3ef73046743f08da3")
    assert str(addr) == "0xdbb881a51cd4023e4400cef3ef73046743f08da3"


def test_hex_to_address_too_long():
    with pytest.raises(ValueError):
        hex_to_address("0x" + "11" * 21)


def test_block_copy_is_independent():
    block = Block(number=3, hash=Hash(b"\x01" * 32), transactions=[Hash(b"\x02" * 32)])
    clone = block.copy()
    assert clone == block
    clone.transactions.append(Hash(b"\x03" * 32))
    assert len(block.transactions) == 1


def test_log_defaults():
    log = Log(topics=[Hash(b"\x05" * 32)], data=b"\x00")
    assert log.topics[0] == b"\x05" * 32
    assert log.address == bytes(20)