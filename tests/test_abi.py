from __future__ import annotations

import pytest
from eth_abi import decode, encode

from basenames import abi
from basenames.errors import AbiError


@pytest.mark.parametrize(
    "fn,selector",
    [
        (abi.REGISTRY_OWNER, "02571be3"),
        (abi.REGISTRY_RESOLVER, "0178b8bf"),
        (abi.RESOLVER_ADDR, "3b3b57de"),
        (abi.RESOLVER_TEXT, "59d1d43c"),
        (abi.RESOLVER_NAME, "691f3431"),
        (abi.RESOLVER_SET_ADDR, "d5fa2b00"),
        (abi.RESOLVER_SET_TEXT, "10f13a8c"),
        (abi.RESOLVER_MULTICALL, "ac9650d8"),
        (abi.CONTROLLER_AVAILABLE, "aeb8ce9b"),
    ],
)
def test_well_known_selectors(fn, selector):
    assert fn.selector.hex() == selector


def test_encode_call_layout():
    node = b"\x01" * 32
    data = abi.REGISTRY_OWNER.encode_call([node])
    assert data[:4] == abi.REGISTRY_OWNER.selector
    assert data[4:] == node


def test_encode_text_call_decodes_back():
    node = b"\x02" * 32
    data = abi.RESOLVER_TEXT.encode_call([node, "com.twitter"])
    assert decode(["bytes32", "string"], data[4:]) == (node, "com.twitter")


def test_decode_single_output_is_unwrapped():
    raw = encode(["address"], ["0x1111111111111111111111111111111111111111"])
    assert abi.REGISTRY_OWNER.decode_return(raw) == "0x1111111111111111111111111111111111111111"
    assert abi.RESOLVER_TEXT.decode_return(encode(["string"], ["hi"])) == "hi"


def test_decode_no_outputs():
    assert abi.RESOLVER_SET_ADDR.decode_return(b"") is None


def test_encode_errors_are_abi_errors():
    with pytest.raises(AbiError) as ei:
        abi.REGISTRY_OWNER.encode_call([])
    assert ei.value.function == "owner(bytes32)"
    with pytest.raises(AbiError):
        abi.RESOLVER_SET_ADDR.encode_call([b"\x00" * 32, "not-an-address"])


def test_decode_short_data_is_abi_error():
    with pytest.raises(AbiError):
        abi.REGISTRY_OWNER.decode_return(b"\x00" * 4)


def test_function_for():
    assert abi.function_for("text(bytes32, string)") is abi.RESOLVER_TEXT
    assert abi.function_for(abi.RESOLVER_ADDR) is abi.RESOLVER_ADDR
    with pytest.raises(AbiError):
        abi.function_for("transfer(address,uint256)")


def test_zero_checks():
    assert abi.is_zero_address(abi.ZERO_ADDRESS)
    assert abi.is_zero_address(None)
    assert not abi.is_zero_address("0x1111111111111111111111111111111111111111")
    assert abi.is_zero_hash(b"\x00" * 32)
    assert abi.is_zero_hash(abi.ZERO_HASH)
    assert not abi.is_zero_hash(b"\x00" * 31 + b"\x01")
