"""
Contract read capability.

`ContractReader` is the seam between the domain code (verification, query,
registration) and the chain: ``call(address, function, args)`` returns the
decoded value of a view function. `EthCallReader` implements it on top of
`RpcClient.eth_call`; tests substitute in-memory fakes.

Example
-------
    async with RpcClient(RpcConfig(url)) as rpc:
        reader = EthCallReader(rpc)
        owner = await reader.call(registry, "owner(bytes32)", [node])
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from ..abi import FunctionLike, function_for
from ..rpc.http import RpcClient


@runtime_checkable
class ContractReader(Protocol):
    async def call(self, address: str, fn: FunctionLike, args: Sequence[Any]) -> Any: ...


class EthCallReader:
    """ContractReader backed by ``eth_call`` against the latest block."""

    def __init__(self, rpc: RpcClient, *, block: str = "latest"):
        self._rpc = rpc
        self._block = block

    @property
    def rpc(self) -> RpcClient:
        return self._rpc

    async def call(self, address: str, fn: FunctionLike, args: Sequence[Any]) -> Any:
        spec = function_for(fn)
        raw = await self._rpc.eth_call(address, spec.encode_call(args), block=self._block)
        return spec.decode_return(raw)

    async def simulate(
        self,
        address: str,
        fn: FunctionLike,
        args: Sequence[Any],
        *,
        sender: Optional[str] = None,
        value: int = 0,
    ) -> Any:
        """
        Dry-run a state-changing function as *sender*. A revert raises
        `RpcResponseError`; nothing is broadcast.
        """
        spec = function_for(fn)
        raw = await self._rpc.eth_call(
            address, spec.encode_call(args), from_=sender, value=value, block=self._block
        )
        return spec.decode_return(raw)


__all__ = ["ContractReader", "EthCallReader"]
