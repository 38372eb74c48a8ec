"""
Basename query: a compact view of one basename.

Unlike `verify`, this reads only a few text records and additionally resolves
the primary name of the address record. Missing data comes back as ``None``;
failures of the registry lookups themselves propagate as `RpcError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from .abi import is_zero_address
from .contracts.basenames import BasenamesReader
from .errors import AbiError, RpcError
from .logging import get_logger
from .names import label_to_node
from .utils.bytes import BytesLike, to_hex

log = get_logger(__name__)

DEFAULT_QUERY_KEYS: Sequence[str] = ("avatar", "description", "address")


@dataclass
class BasenameRecord:
    basename: str
    node: bytes
    owner: Optional[str] = None
    resolver: Optional[str] = None
    address_record: Optional[str] = None
    primary_name: Optional[str] = None
    records: Dict[str, Optional[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basename": self.basename,
            "node": to_hex(self.node),
            "owner": self.owner,
            "resolver": self.resolver,
            "address_record": self.address_record,
            "primary_name": self.primary_name,
            "records": dict(self.records),
        }


async def _optional(coro: Any, event: str, **kv: Any) -> Any:
    try:
        return await coro
    except (RpcError, AbiError) as e:
        log.debug(event, error=str(e), **kv)
        return None


async def query_basename(
    basename: str,
    reader: BasenamesReader,
    parent_node: BytesLike,
    *,
    keys: Sequence[str] = DEFAULT_QUERY_KEYS,
) -> BasenameRecord:
    resolved = label_to_node(basename, parent_node)
    node = resolved.node
    out = BasenameRecord(basename=resolved.normalized_name, node=node)

    resolver = await reader.resolver(node)
    if is_zero_address(resolver):
        return out
    out.resolver = resolver
    out.owner = await reader.owner(node)

    addr = await _optional(reader.read_address(resolver, node), "query_addr_missing", node=to_hex(node))
    if not is_zero_address(addr):
        out.address_record = addr

    for key in keys:
        value = await _optional(reader.read_record(resolver, node, key), "query_text_missing", key=key)
        out.records[key] = value or None

    if out.address_record:
        out.primary_name = await _optional(
            reader.primary_name(out.address_record), "query_reverse_missing", address=out.address_record
        )

    return out


__all__ = ["BasenameRecord", "DEFAULT_QUERY_KEYS", "query_basename"]
