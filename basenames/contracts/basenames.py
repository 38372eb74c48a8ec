"""
Typed read operations over the four basenames contracts.

`BasenamesReader` binds a `ContractReader` to a set of `ContractAddresses` and
exposes one coroutine per contract lookup. It does no error absorption: every
failure propagates as the underlying RpcError/AbiError, and callers (verify,
query) decide what a failure means.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .. import abi
from ..config import ContractAddresses
from ..records import KeyLike, RecordKey
from ..utils.bytes import BytesLike
from .reader import ContractReader


def _key(key: KeyLike) -> str:
    return key.value if isinstance(key, RecordKey) else str(key)


class BasenamesReader:
    def __init__(self, reader: ContractReader, contracts: ContractAddresses):
        self.reader = reader
        self.contracts = contracts

    # ---- Registry ----

    async def owner(self, node: BytesLike) -> str:
        return await self.reader.call(self.contracts.registry, abi.REGISTRY_OWNER, [bytes(node)])

    async def resolver(self, node: BytesLike) -> str:
        return await self.reader.call(self.contracts.registry, abi.REGISTRY_RESOLVER, [bytes(node)])

    async def resolve_owner_and_resolver(self, node: BytesLike) -> Tuple[Optional[str], Optional[str]]:
        """
        (owner, resolver) with zero addresses mapped to None. The resolver is
        only looked up when the node has an owner.
        """
        owner = await self.owner(node)
        if abi.is_zero_address(owner):
            return None, None
        resolver = await self.resolver(node)
        if abi.is_zero_address(resolver):
            return owner, None
        return owner, resolver

    # ---- Resolver ----

    async def read_record(self, resolver: str, node: BytesLike, key: KeyLike) -> str:
        return await self.reader.call(resolver, abi.RESOLVER_TEXT, [bytes(node), _key(key)])

    async def read_address(self, resolver: str, node: BytesLike) -> str:
        return await self.reader.call(resolver, abi.RESOLVER_ADDR, [bytes(node)])

    async def name(self, node: BytesLike, resolver: Optional[str] = None) -> str:
        return await self.reader.call(resolver or self.contracts.resolver, abi.RESOLVER_NAME, [bytes(node)])

    # ---- Reverse registrar ----

    async def reverse_node(self, address: str) -> bytes:
        return await self.reader.call(self.contracts.reverse_registrar, abi.REVERSE_NODE, [address])

    async def primary_name(self, address: str) -> Optional[str]:
        """Reverse-resolve *address*; empty results come back as None."""
        rnode = await self.reverse_node(address)
        if abi.is_zero_hash(rnode):
            return None
        return (await self.name(rnode)) or None

    # ---- Registrar controller ----

    async def available(self, label: str) -> bool:
        return bool(
            await self.reader.call(self.contracts.registrar_controller, abi.CONTROLLER_AVAILABLE, [label])
        )

    async def register_price(self, label: str, duration: int) -> int:
        return int(
            await self.reader.call(
                self.contracts.registrar_controller, abi.CONTROLLER_REGISTER_PRICE, [label, int(duration)]
            )
        )


__all__ = ["BasenamesReader", "ContractAddresses"]
