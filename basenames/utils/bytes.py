from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """
    Ensure input is bytes.

    Accepts:
      - bytes / bytearray / memoryview  -> bytes(data)
      - str: treated as hex; optional '0x' prefix; even-length enforced

    Raises:
      ValueError on invalid hex strings.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return from_hex(data)
    raise TypeError(f"Unsupported type for ensure_bytes: {type(data)!r}")


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    """
    Bytes -> hex string (lowercase). Prefix with '0x' by default.
    """
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


def from_hex(s: str) -> bytes:
    """
    Hex string (optionally '0x' prefixed) -> bytes.

    Enforces even-length (nibbles must pair to bytes) and lowercase/uppercase agnostic.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a string")
    if s.startswith(("0x", "0X")):
        s = s[2:]
    if len(s) % 2 != 0:
        raise ValueError("hex string must have even length")
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


def to_bytes32(data: Union[BytesLike, str]) -> bytes:
    """Coerce bytes or 0x-hex into exactly 32 bytes, raising ValueError otherwise."""
    b = ensure_bytes(data)
    if len(b) != 32:
        raise ValueError(f"expected 32 bytes, got {len(b)}")
    return b


def hex_to_int(s: str) -> int:
    """JSON-RPC quantity ('0x1a') -> int. An empty quantity ('0x') is 0."""
    if not isinstance(s, str) or not s.startswith(("0x", "0X")):
        raise ValueError(f"not a hex quantity: {s!r}")
    return int(s[2:] or "0", 16)


__all__ = [
    "BytesLike",
    "ensure_bytes",
    "to_hex",
    "from_hex",
    "to_bytes32",
    "hex_to_int",
]
