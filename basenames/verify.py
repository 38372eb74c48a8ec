"""
Verification aggregation over the full record schema.

Given a node, report the status of all 17 standard records: ``set`` (non-empty
value), ``empty`` (absent) or ``error`` (the lookup itself failed). The report
always contains every key in canonical order, plus a summary.

Failure handling:

- owner lookup returns the zero address, or the owner/resolver lookup raises:
  all 17 records ``empty``, owner and resolver ``None``;
- resolver lookup returns the zero address: all ``empty``, owner populated;
- ``addr`` lookup returns zero or raises: ``empty`` (never ``error``);
- a text lookup raises: ``error`` for that key only, carrying the message.

Nothing here raises for lookup failures. Invalid names raise
`NormalizationError` from `verify_basename` before any lookup.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol

from .abi import is_zero_address
from .logging import get_logger
from .names import label_to_node
from .records import ADDRESS_KEY, STANDARD_KEYS, TEXT_KEYS, RecordKey, get_record_category
from .utils.bytes import BytesLike, to_hex

log = get_logger(__name__)


class RecordStatus(str, Enum):
    SET = "set"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class RecordResult:
    """
    Outcome of one record lookup. Build through `set`, `empty` or `failed`;
    the constructor enforces the per-status shape.
    """

    status: RecordStatus
    value: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status is RecordStatus.SET:
            if not self.value or self.error is not None:
                raise ValueError("a set record needs a non-empty value and no error")
        elif self.status is RecordStatus.EMPTY:
            if self.value is not None or self.error is not None:
                raise ValueError("an empty record carries neither value nor error")
        elif self.status is RecordStatus.ERROR:
            if not self.error or self.value is not None:
                raise ValueError("an error record needs a message and no value")

    @classmethod
    def set(cls, value: str) -> "RecordResult":
        return cls(RecordStatus.SET, value=value)

    @classmethod
    def empty(cls) -> "RecordResult":
        return _EMPTY

    @classmethod
    def failed(cls, message: str) -> "RecordResult":
        return cls(RecordStatus.ERROR, error=message or "lookup failed")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"status": self.status.value}
        if self.value is not None:
            out["value"] = self.value
        if self.error is not None:
            out["error"] = self.error
        return out


_EMPTY = RecordResult(RecordStatus.EMPTY)


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


@dataclass(frozen=True)
class VerificationSummary:
    set: int
    empty: int
    error: int
    total: int
    percentage: int

    @classmethod
    def from_records(cls, records: Mapping[Any, RecordResult]) -> "VerificationSummary":
        counts = {s: 0 for s in RecordStatus}
        for r in records.values():
            counts[r.status] += 1
        total = len(records)
        pct = round_half_up(counts[RecordStatus.SET] / total * 100) if total else 0
        return cls(
            set=counts[RecordStatus.SET],
            empty=counts[RecordStatus.EMPTY],
            error=counts[RecordStatus.ERROR],
            total=total,
            percentage=pct,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "set": self.set,
            "empty": self.empty,
            "error": self.error,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class VerificationResult:
    node: bytes
    records: Dict[RecordKey, RecordResult]
    summary: VerificationSummary
    owner: Optional[str] = None
    resolver: Optional[str] = None
    address_record: Optional[str] = None
    basename: Optional[str] = None
    normalized_name: Optional[str] = None

    @property
    def node_hex(self) -> str:
        return to_hex(self.node)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basename": self.basename,
            "normalized_name": self.normalized_name,
            "node": self.node_hex,
            "owner": self.owner,
            "resolver": self.resolver,
            "address_record": self.address_record,
            "records": {
                k.value: dict(r.to_dict(), category=get_record_category(k).value)
                for k, r in self.records.items()
            },
            "summary": self.summary.to_dict(),
        }


class RecordLookups(Protocol):
    """The read operations verification needs (see `BasenamesReader`)."""

    async def owner(self, node: BytesLike) -> str: ...

    async def resolver(self, node: BytesLike) -> str: ...

    async def read_address(self, resolver: str, node: BytesLike) -> str: ...

    async def read_record(self, resolver: str, node: BytesLike, key: Any) -> str: ...


def _all_empty() -> Dict[RecordKey, RecordResult]:
    return {k: RecordResult.empty() for k in STANDARD_KEYS}


def _result(node: bytes, records: Dict[RecordKey, RecordResult], **kw: Any) -> VerificationResult:
    return VerificationResult(
        node=node, records=records, summary=VerificationSummary.from_records(records), **kw
    )


async def _read_address(reader: RecordLookups, resolver: str, node: bytes) -> RecordResult:
    try:
        value = await reader.read_address(resolver, node)
    except Exception as e:
        # A failed address lookup reads as "not set".
        log.debug("addr_lookup_failed", node=to_hex(node), error=str(e))
        return RecordResult.empty()
    if is_zero_address(value):
        return RecordResult.empty()
    return RecordResult.set(str(value))


async def _read_text(reader: RecordLookups, resolver: str, node: bytes, key: RecordKey) -> RecordResult:
    try:
        value = await reader.read_record(resolver, node, key)
    except Exception as e:
        log.warning("record_lookup_failed", node=to_hex(node), key=key.value, error=str(e))
        return RecordResult.failed(str(e))
    return RecordResult.set(value) if value else RecordResult.empty()


async def verify_node(
    reader: RecordLookups,
    node: BytesLike,
    *,
    basename: Optional[str] = None,
    normalized_name: Optional[str] = None,
) -> VerificationResult:
    """Aggregate all 17 record statuses for *node*. Never raises for lookup failures."""
    node_b = bytes(node)
    names = {"basename": basename, "normalized_name": normalized_name}
    # results without resolved records are labelled by the normalized name
    bare = {"basename": normalized_name or basename, "normalized_name": normalized_name}

    try:
        owner = await reader.owner(node_b)
        if is_zero_address(owner):
            log.debug("verify_unowned", node=to_hex(node_b))
            return _result(node_b, _all_empty(), **bare)
        resolver = await reader.resolver(node_b)
    except Exception as e:
        log.warning("registry_lookup_failed", node=to_hex(node_b), error=str(e))
        return _result(node_b, _all_empty(), **bare)

    if is_zero_address(resolver):
        log.debug("verify_no_resolver", node=to_hex(node_b), owner=owner)
        return _result(node_b, _all_empty(), owner=owner, **bare)

    addr_result, *text_results = await asyncio.gather(
        _read_address(reader, resolver, node_b),
        *(_read_text(reader, resolver, node_b, k) for k in TEXT_KEYS),
    )

    records: Dict[RecordKey, RecordResult] = {ADDRESS_KEY: addr_result}
    records.update(zip(TEXT_KEYS, text_results))

    result = _result(
        node_b,
        records,
        owner=owner,
        resolver=resolver,
        address_record=addr_result.value,
        **names,
    )
    log.info("verify_done", node=to_hex(node_b), **result.summary.to_dict())
    return result


async def verify_basename(basename: str, reader: RecordLookups, parent_node: BytesLike) -> VerificationResult:
    """Normalize *basename*, derive its node under *parent_node* and verify it."""
    resolved = label_to_node(basename, parent_node)
    return await verify_node(
        reader, resolved.node, basename=basename, normalized_name=resolved.normalized_name
    )


__all__ = [
    "RecordStatus",
    "RecordResult",
    "VerificationSummary",
    "VerificationResult",
    "RecordLookups",
    "round_half_up",
    "verify_node",
    "verify_basename",
]
