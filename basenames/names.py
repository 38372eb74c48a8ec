"""
Name handling: normalization, label extraction and node derivation.

Two hashes live here:

- `namehash(name)` is the EIP-137 hierarchical hash, used once to turn the
  parent domain (``basetest.eth``) into the parent node.
- `derive_node(label, parent_node)` is the registry's subname addressing:
  ``keccak256(parent_node || keccak256(label))`` over raw bytes. Lookups built
  on any other encoding silently resolve to a different node.

Normalization (ENSIP-15) is delegated to the ``ens-normalize`` package and must
happen before derivation; `derive_node` hashes exactly the label it is given.
"""

from __future__ import annotations

from typing import NamedTuple

from ens_normalize import DisallowedSequence, ens_normalize

from .errors import NormalizationError
from .utils.bytes import BytesLike, to_hex
from .utils.hash import keccak256_concat, keccak256_text

EMPTY_NODE = b"\x00" * 32


def normalize_name(name: str) -> str:
    """Normalize *name* per ENSIP-15, raising NormalizationError on disallowed input."""
    try:
        return ens_normalize(name)
    except DisallowedSequence as e:
        raise NormalizationError(name, str(e)) from e


def extract_label(full_name: str) -> str:
    """First dot-separated segment: ``"alice.basetest.eth" -> "alice"``."""
    return full_name.split(".", 1)[0]


def full_name(label: str, parent_domain: str) -> str:
    return f"{label}.{parent_domain}" if parent_domain else label


def labelhash(label: str) -> bytes:
    return keccak256_text(label)


def namehash(name: str) -> bytes:
    """EIP-137 namehash. The caller is responsible for normalizing *name*."""
    node = EMPTY_NODE
    if not name:
        return node
    for label in reversed(name.split(".")):
        node = keccak256_concat((node, labelhash(label)))
    return node


def derive_node(label: str, parent_node: BytesLike) -> bytes:
    """
    Subname node for *label* under *parent_node*.

    Pure and deterministic. Does not normalize.
    """
    if not label:
        raise ValueError("label must be a non-empty string")
    parent = bytes(parent_node)
    if len(parent) != 32:
        raise ValueError(f"parent node must be 32 bytes, got {len(parent)}")
    return keccak256_concat((parent, labelhash(label)))


class ResolvedName(NamedTuple):
    normalized_name: str
    label: str
    node: bytes

    @property
    def node_hex(self) -> str:
        return to_hex(self.node)


def label_to_node(name: str, parent_node: BytesLike) -> ResolvedName:
    """
    Normalize *name* (a bare label or a full ``label.parent`` name), take its
    first label and derive the node under *parent_node*.
    """
    normalized = normalize_name(name)
    label = extract_label(normalized)
    if not label:
        raise NormalizationError(name, "empty label")
    return ResolvedName(normalized, label, derive_node(label, parent_node))


__all__ = [
    "EMPTY_NODE",
    "ResolvedName",
    "normalize_name",
    "extract_label",
    "full_name",
    "labelhash",
    "namehash",
    "derive_node",
    "label_to_node",
]
