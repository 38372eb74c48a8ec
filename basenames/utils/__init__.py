"""
Utility helpers.

Re-exports:
- bytes: hex helpers
- hash: Keccak-256 convenience wrappers
"""

from .bytes import ensure_bytes, from_hex, hex_to_int, to_bytes32, to_hex
from .hash import keccak256, keccak256_concat, keccak256_hex, keccak256_text

__all__ = [
    # bytes
    "to_hex",
    "from_hex",
    "ensure_bytes",
    "to_bytes32",
    "hex_to_int",
    # hash
    "keccak256",
    "keccak256_hex",
    "keccak256_text",
    "keccak256_concat",
]
