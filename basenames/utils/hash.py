from __future__ import annotations

from typing import Iterable

from Crypto.Hash import keccak as _keccak

from .bytes import BytesLike, ensure_bytes, to_hex

# --- Keccak-256 (Ethereum-style) ----------------------------------------------
# hashlib only ships NIST SHA3 (different padding), so Keccak comes from
# pycryptodome.


def keccak256(data: BytesLike | str) -> bytes:
    """Return Keccak-256 digest of *data* (bytes, or 0x-hex string)."""
    h = _keccak.new(digest_bits=256)
    h.update(ensure_bytes(data))
    return h.digest()


def keccak256_hex(data: BytesLike | str, *, prefix: bool = True) -> str:
    """Return hex string of Keccak-256 digest (0x-prefixed by default)."""
    return to_hex(keccak256(data), prefix=prefix)


def keccak256_text(text: str) -> bytes:
    """Keccak-256 of the UTF-8 encoding of *text*."""
    return keccak256(text.encode("utf-8"))


def keccak256_concat(parts: Iterable[BytesLike]) -> bytes:
    """Keccak-256 over the byte concatenation of *parts* (abi.encodePacked of fixed-size values)."""
    h = _keccak.new(digest_bits=256)
    for p in parts:
        if not isinstance(p, (bytes, bytearray, memoryview)):
            raise TypeError("all parts must be bytes-like")
        h.update(bytes(p))
    return h.digest()


__all__ = [
    "keccak256",
    "keccak256_hex",
    "keccak256_text",
    "keccak256_concat",
]
