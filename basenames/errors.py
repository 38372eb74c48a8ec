"""
Typed error classes for the basenames client.

Failures that mean "the thing you asked about does not exist" are absorbed into
result shapes by `verify` and `query`; the classes below cover the cases that
propagate: bad input (labels, record keys, record values handed to a write
helper), transport/JSON-RPC failures, ABI problems and failed transactions.
Everything derives from `BasenamesError` so callers can catch the family.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "BasenamesError",
    "NormalizationError",
    "UnknownRecordKey",
    "InvalidRecordsError",
    "NameUnavailableError",
    "ChainMismatchError",
    "RpcError",
    "RpcTransportError",
    "RpcResponseError",
    "JsonRpcCode",
    "AbiError",
    "TxError",
    "from_jsonrpc_error",
]


class BasenamesError(Exception):
    """Base class for all client errors."""


class NormalizationError(BasenamesError, ValueError):
    """Raised when a name cannot be normalized (ENSIP-15)."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"cannot normalize {name!r}: {reason}")
        self.name = name
        self.reason = reason


class UnknownRecordKey(BasenamesError, ValueError):
    """Raised when a key outside the 17 standard record keys is used as one."""

    def __init__(self, key: str) -> None:
        super().__init__(f"unknown record key: {key!r}")
        self.key = key


class InvalidRecordsError(BasenamesError, ValueError):
    """Raised by write helpers when record values fail validation."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        keys = ", ".join(sorted(self.errors))
        super().__init__(f"invalid record values: {keys}")


class NameUnavailableError(BasenamesError):
    """Raised when registering a label that is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"basename {name!r} is not available")
        self.name = name


class ChainMismatchError(BasenamesError):
    """Raised when the node serves a different chain than the one configured."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"node reports chain id {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual


class JsonRpcCode(IntEnum):
    # JSON-RPC 2.0
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (implementation-defined range: -32099 to -32000)
    SERVER_ERROR = -32000

    # eth_call revert (geth / op-geth)
    EXECUTION_REVERTED = 3


class RpcError(BasenamesError):
    """Base class for node RPC failures."""


class RpcTransportError(RpcError):
    """Network/HTTP transport-level error."""

    def __init__(self, message: str, *, http_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.http_status = http_status


class RpcResponseError(RpcError):
    """JSON-RPC error object returned from the node (includes contract reverts)."""

    def __init__(
        self,
        code: int,
        message: str,
        data: Any | None = None,
        *,
        method: Optional[str] = None,
    ) -> None:
        super().__init__(f"RPC[{method or '-'}] error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data
        self.method = method

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None

    @property
    def is_revert(self) -> bool:
        return self.code == JsonRpcCode.EXECUTION_REVERTED or "revert" in self.message.lower()


@dataclass
class AbiError(BasenamesError):
    """
    Raised when ABI encoding/decoding fails.

    Typical causes: wrong arg types/lengths, malformed addresses, short return data.
    """

    message: str
    function: Optional[str] = None
    details: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f" [fn={self.function}]" if self.function else ""
        tail = f": {self.details}" if self.details else ""
        return f"AbiError{where}: {self.message}{tail}"


@dataclass
class TxError(BasenamesError):
    """
    Raised when a submitted transaction reverts or its receipt never shows up.

    Fields:
      - tx_hash: hex hash if known
      - receipt: the receipt as returned by the node, when one was found
    """

    message: str
    tx_hash: Optional[str] = None
    receipt: Optional[Dict[str, Any]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover - trivial
        suffix = f" tx={self.tx_hash}" if self.tx_hash else ""
        return f"TxError{suffix}: {self.message}"


def from_jsonrpc_error(err_obj: Mapping[str, Any], *, method: Optional[str] = None) -> RpcResponseError:
    """
    Convert a JSON-RPC error object into RpcResponseError.

    `err_obj` should resemble: {"code": int, "message": str, "data": any?}
    """
    code = int(err_obj.get("code", JsonRpcCode.SERVER_ERROR))
    message = str(err_obj.get("message", "Unknown JSON-RPC error"))
    return RpcResponseError(code, message, err_obj.get("data"), method=method)
