"""JSON-RPC transport."""

from .http import RpcClient, RpcConfig

__all__ = ["RpcClient", "RpcConfig"]
