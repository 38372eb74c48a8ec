"""
Contract function table and call-data codec.

Each contract function the client touches is described by a `FunctionSpec`
(name, input types, output types). Encoding/decoding goes through ``eth-abi``;
selectors are the first four bytes of the Keccak-256 of the canonical
signature.

    >>> REGISTRY_OWNER.signature
    'owner(bytes32)'
    >>> REGISTRY_OWNER.selector.hex()
    '02571be3'
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any, Dict, Sequence, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError

from .errors import AbiError
from .utils.hash import keccak256_text

ZERO_ADDRESS = "0x" + "00" * 20
ZERO_HASH = "0x" + "00" * 32


@dataclass(frozen=True)
class FunctionSpec:
    name: str
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    payable: bool = False
    view: bool = True

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @cached_property
    def selector(self) -> bytes:
        return keccak256_text(self.signature)[:4]

    def encode_call(self, args: Sequence[Any]) -> bytes:
        """Selector + ABI-encoded arguments."""
        if len(args) != len(self.inputs):
            raise AbiError(
                f"expected {len(self.inputs)} args, got {len(args)}",
                function=self.signature,
            )
        try:
            return self.selector + encode(list(self.inputs), list(args))
        except (EncodingError, TypeError, ValueError) as e:
            raise AbiError("encode failed", function=self.signature, details=str(e)) from e

    def decode_return(self, data: bytes) -> Any:
        """
        Decode return data. A single output is unwrapped; no outputs gives None;
        several outputs come back as a tuple.
        """
        if not self.outputs:
            return None
        try:
            values = decode(list(self.outputs), bytes(data))
        except (DecodingError, TypeError, ValueError) as e:
            raise AbiError("decode failed", function=self.signature, details=str(e)) from e
        return values[0] if len(values) == 1 else tuple(values)


# --- Registry ------------------------------------------------------------------

REGISTRY_OWNER = FunctionSpec("owner", ("bytes32",), ("address",))
REGISTRY_RESOLVER = FunctionSpec("resolver", ("bytes32",), ("address",))

# --- Resolver ------------------------------------------------------------------

RESOLVER_ADDR = FunctionSpec("addr", ("bytes32",), ("address",))
RESOLVER_TEXT = FunctionSpec("text", ("bytes32", "string"), ("string",))
RESOLVER_NAME = FunctionSpec("name", ("bytes32",), ("string",))
RESOLVER_SET_ADDR = FunctionSpec("setAddr", ("bytes32", "address"), view=False)
RESOLVER_SET_TEXT = FunctionSpec("setText", ("bytes32", "string", "string"), view=False)
RESOLVER_MULTICALL = FunctionSpec("multicall", ("bytes[]",), ("bytes[]",), view=False)

# --- Reverse registrar ---------------------------------------------------------

REVERSE_NODE = FunctionSpec("node", ("address",), ("bytes32",))
REVERSE_SET_NAME_FOR_ADDR = FunctionSpec(
    "setNameForAddr", ("address", "address", "address", "string"), ("bytes32",), view=False
)

# --- Registrar controller ------------------------------------------------------

REGISTER_REQUEST_TYPE = "(string,address,uint256,address,bytes[],bool)"

CONTROLLER_AVAILABLE = FunctionSpec("available", ("string",), ("bool",))
CONTROLLER_REGISTER_PRICE = FunctionSpec("registerPrice", ("string", "uint256"), ("uint256",))
CONTROLLER_REGISTER = FunctionSpec("register", (REGISTER_REQUEST_TYPE,), payable=True, view=False)


KNOWN_FUNCTIONS: Dict[str, FunctionSpec] = {
    f.signature: f
    for f in (
        REGISTRY_OWNER,
        REGISTRY_RESOLVER,
        RESOLVER_ADDR,
        RESOLVER_TEXT,
        RESOLVER_NAME,
        RESOLVER_SET_ADDR,
        RESOLVER_SET_TEXT,
        RESOLVER_MULTICALL,
        REVERSE_NODE,
        REVERSE_SET_NAME_FOR_ADDR,
        CONTROLLER_AVAILABLE,
        CONTROLLER_REGISTER_PRICE,
        CONTROLLER_REGISTER,
    )
}

FunctionLike = Union[FunctionSpec, str]


def function_for(fn: FunctionLike) -> FunctionSpec:
    """Accept a FunctionSpec or a canonical signature such as ``"text(bytes32,string)"``."""
    if isinstance(fn, FunctionSpec):
        return fn
    try:
        return KNOWN_FUNCTIONS[fn.replace(" ", "")]
    except KeyError:
        raise AbiError(f"unknown function signature {fn!r}") from None


def is_zero_address(addr: Any) -> bool:
    return not addr or str(addr).lower() == ZERO_ADDRESS


def is_zero_hash(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray)):
        return not any(value)
    return not value or str(value).lower() == ZERO_HASH


__all__ = [
    "ZERO_ADDRESS",
    "ZERO_HASH",
    "FunctionSpec",
    "FunctionLike",
    "REGISTRY_OWNER",
    "REGISTRY_RESOLVER",
    "RESOLVER_ADDR",
    "RESOLVER_TEXT",
    "RESOLVER_NAME",
    "RESOLVER_SET_ADDR",
    "RESOLVER_SET_TEXT",
    "RESOLVER_MULTICALL",
    "REVERSE_NODE",
    "REVERSE_SET_NAME_FOR_ADDR",
    "REGISTER_REQUEST_TYPE",
    "CONTROLLER_AVAILABLE",
    "CONTROLLER_REGISTER_PRICE",
    "CONTROLLER_REGISTER",
    "KNOWN_FUNCTIONS",
    "function_for",
    "is_zero_address",
    "is_zero_hash",
]
