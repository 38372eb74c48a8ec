"""
basenames: client for ENS-style subdomains ("basenames") on Base.
Convenience exports for the most common APIs.
"""

from .version import __version__  # noqa: F401

# Config & errors
from .config import ContractAddresses, Settings, get_settings  # noqa: F401
from .errors import (  # noqa: F401
    AbiError,
    BasenamesError,
    ChainMismatchError,
    InvalidRecordsError,
    NameUnavailableError,
    NormalizationError,
    RpcError,
    TxError,
    UnknownRecordKey,
)

# Names & records
from .names import derive_node, extract_label, label_to_node, namehash, normalize_name  # noqa: F401
from .records import (  # noqa: F401
    STANDARD_KEYS,
    RecordCategory,
    RecordKey,
    get_record_category,
    get_records_by_category,
    validate_record,
    validate_records,
)

# Chain access
from .rpc.http import RpcClient, RpcConfig  # noqa: F401
from .contracts import BasenamesReader, ContractReader, EthCallReader  # noqa: F401

# Operations
from .verify import RecordResult, RecordStatus, VerificationResult, verify_basename, verify_node  # noqa: F401
from .query import BasenameRecord, query_basename  # noqa: F401
from .register import MIN_DURATION, Registrar, TransactionSender  # noqa: F401

__all__ = [
    "__version__",
    "ContractAddresses",
    "Settings",
    "get_settings",
    "AbiError",
    "BasenamesError",
    "ChainMismatchError",
    "InvalidRecordsError",
    "NameUnavailableError",
    "NormalizationError",
    "RpcError",
    "TxError",
    "UnknownRecordKey",
    "derive_node",
    "extract_label",
    "label_to_node",
    "namehash",
    "normalize_name",
    "STANDARD_KEYS",
    "RecordCategory",
    "RecordKey",
    "get_record_category",
    "get_records_by_category",
    "validate_record",
    "validate_records",
    "RpcClient",
    "RpcConfig",
    "BasenamesReader",
    "ContractReader",
    "EthCallReader",
    "RecordResult",
    "RecordStatus",
    "VerificationResult",
    "verify_basename",
    "verify_node",
    "BasenameRecord",
    "query_basename",
    "MIN_DURATION",
    "Registrar",
    "TransactionSender",
]
