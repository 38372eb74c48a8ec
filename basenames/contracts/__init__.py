"""
Contract access: the generic read capability and the basenames-specific
lookups built on it.
"""

from .basenames import BasenamesReader, ContractAddresses
from .reader import ContractReader, EthCallReader

__all__ = [
    "BasenamesReader",
    "ContractAddresses",
    "ContractReader",
    "EthCallReader",
]
